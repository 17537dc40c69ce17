import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "staffing_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

# Tests run against the in-memory repositories unless told otherwise.
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory")
AUTO_INIT_DB = False

DEFAULT_REQUIRED_COVERAGE = 0
DEFAULT_MAX_CONCURRENT_BREAKS = None

CLOCK_FUTURE_SKEW_MINUTES = 2
CLOCK_ADJUSTMENT_TOLERANCE_MINUTES = 5
