import os

from .config import Config, cors_origins_from_env

SECRET_KEY = Config.SECRET_KEY
JWT_SECRET_KEY = Config.JWT_SECRET_KEY
JWT_ACCESS_TOKEN_HOURS = Config.JWT_ACCESS_TOKEN_HOURS

DB_CONFIG = {
    "host": Config.DB_HOST,
    "port": Config.DB_PORT,
    "user": Config.DB_USER,
    "password": Config.DB_PASSWORD,
    "database": Config.DB_NAME,
}

DEBUG = bool(int(os.getenv("DEBUG", "1")))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = Config.AUTO_SEED_DB

DEFAULT_PAGE_SIZE = Config.DEFAULT_PAGE_SIZE
MAX_PAGE_SIZE = Config.MAX_PAGE_SIZE

CORS_ORIGINS = cors_origins_from_env("http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173")
