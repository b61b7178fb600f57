# database/database.py
import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from config import DB_PATH

logger = logging.getLogger(__name__)

# Le miroir est écrit par le polling et lu par l'API en même temps
SQLITE_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA busy_timeout=5000",
    "PRAGMA synchronous=NORMAL",
)

Base = declarative_base()


def make_engine(url: str = DB_PATH) -> AsyncEngine:
    engine = create_async_engine(url, echo=False)
    if engine.dialect.name == "sqlite":
        @event.listens_for(engine.sync_engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            for pragma in SQLITE_PRAGMAS:
                cur.execute(pragma)
            cur.close()
    return engine


def make_session_factory(bind: AsyncEngine):
    return sessionmaker(bind, expire_on_commit=False, class_=AsyncSession)


engine = make_engine()
async_session = make_session_factory(engine)

# modèles après Base
from database import message   # noqa: E402


async def init_db(bind: AsyncEngine = engine) -> None:
    """Crée la table miroir si besoin (idempotent)."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Mirror tables ready on %s", bind.url.render_as_string(hide_password=True))
