import os
import yaml
from dotenv import load_dotenv

load_dotenv()

# Fichier YAML (optionnel : sans lui, valeurs par défaut)
CONFIG_PATH = os.getenv("FORUM_CONFIG", "config.yml")
cfg = {}
if os.path.exists(CONFIG_PATH):
    with open(CONFIG_PATH, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}

# Secrets et connexions
TOKEN = os.getenv("TELEGRAM_TOKEN")
DB_PATH = os.getenv("DB_PATH", "sqlite+aiosqlite:///forum.sqlite3")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# IDs Telegram
FORUM_CHAT = int(cfg.get("forum_chat", 0))
ADMINS = set(cfg.get("admin_ids", []))

# API lecture
API_HOST = cfg.get("api_host", "0.0.0.0")
API_PORT = int(cfg.get("api_port", 8080))

# Recherche / réconciliation
BOARD_SEARCH_LIMIT = cfg.get("board_search_limit", 100)
THREAD_SEARCH_LIMIT = cfg.get("thread_search_limit", 200)
POST_SEARCH_LIMIT = cfg.get("post_search_limit", 500)
SCAN_PAGE_SIZE = cfg.get("scan_page_size", 100)
SCAN_MAX_PAGES = cfg.get("scan_max_pages", 30)

# Pagination et activité
POSTS_PAGE_SIZE = cfg.get("posts_page_size", 10)
BOARD_ACTIVITY_THREADS = cfg.get("board_activity_threads", 20)
