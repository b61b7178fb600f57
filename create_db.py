# create_db.py
import asyncio

from database.database import init_db


async def create() -> None:
    """Crée la table miroir des messages (SQLite ou autre)."""
    await init_db()
    print("✅ Base de données initialisée avec succès.")

if __name__ == "__main__":
    asyncio.run(create())
