import os

SECRET_KEY = "test-secret"
JWT_SECRET_KEY = "test-jwt-secret"
JWT_ACCESS_TOKEN_HOURS = 1

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "rockview_test"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

CORS_ORIGINS = []
