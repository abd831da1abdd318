import os

# DB (shared by every service)
DB_USER = os.getenv("DB_USER", "cleaning")
DB_PASS = os.getenv("DB_PASS", "cleaning")
DB_NAME = os.getenv("DB_NAME", "cleaning")
DB_HOST = os.getenv("DB_HOST", "postgres")
DB_PORT = os.getenv("DB_PORT", "5432")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+psycopg2://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

# "sql" for the database, "memory" for a process-local store (local dev only)
STORE_BACKEND = os.getenv("STORE_BACKEND", "sql")

# JWT
AUTH_SECRET = os.getenv("AUTH_SECRET", "dev-secret-change-me")
ACCESS_TTL_SECONDS = int(os.getenv("ACCESS_TTL_SECONDS", "900"))  # 15m

ISSUER = "cleaning-marketplace-auth"
ALGO = "HS256"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Redis (search result cache, shared so writers can invalidate it)
REDIS_HOST = os.getenv("REDIS_HOST", "redis")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_DB = int(os.getenv("REDIS_DB", "0"))
CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", "60"))
SEARCH_CACHE_ENABLED = os.getenv("SEARCH_CACHE_ENABLED", "1").strip().lower() in {"1", "true", "yes", "y"}
