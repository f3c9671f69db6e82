import os

from .config import Config, cors_origins_from_env

SECRET_KEY = os.getenv("SECRET_KEY")
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY") or os.getenv("JWT_SECRET")
if not SECRET_KEY or not JWT_SECRET_KEY:
    raise RuntimeError("SECRET_KEY and JWT_SECRET_KEY are required in production")
JWT_ACCESS_TOKEN_HOURS = Config.JWT_ACCESS_TOKEN_HOURS

DB_CONFIG = {
    "host": Config.DB_HOST,
    "port": Config.DB_PORT,
    "user": Config.DB_USER,
    "password": Config.DB_PASSWORD,
    "database": Config.DB_NAME,
}

DEBUG = False

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = Config.AUTO_SEED_DB

DEFAULT_PAGE_SIZE = Config.DEFAULT_PAGE_SIZE
MAX_PAGE_SIZE = Config.MAX_PAGE_SIZE

CORS_ORIGINS = cors_origins_from_env()
