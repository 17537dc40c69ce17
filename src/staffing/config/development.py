import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "staffing_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# "mysql" or "memory"
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Break limits for locations without their own policy row
DEFAULT_REQUIRED_COVERAGE = int(os.getenv("DEFAULT_REQUIRED_COVERAGE", "0"))
DEFAULT_MAX_CONCURRENT_BREAKS = os.getenv("DEFAULT_MAX_CONCURRENT_BREAKS") or None

# Client-supplied clock times: how far ahead of the server clock they may be, and how
# far behind before the entry is treated as a manager-approved adjustment.
CLOCK_FUTURE_SKEW_MINUTES = int(os.getenv("CLOCK_FUTURE_SKEW_MINUTES", "2"))
CLOCK_ADJUSTMENT_TOLERANCE_MINUTES = int(os.getenv("CLOCK_ADJUSTMENT_TOLERANCE_MINUTES", "5"))
