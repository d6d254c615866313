import os

SECRET_KEY = os.environ.get("SECRET_KEY", "TU_SECRET_KEY_TEMPORAL")
ALGORITHM = os.environ.get("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = float(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

# Default to local SQLite for dev/tests; override via env in Docker/Prod
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./tasktimer.db")

# Day/week boundaries for the dashboard are computed in this zone
TIMEZONE = os.environ.get("TIMEZONE", "UTC")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
# Optional path; when unset logs only go to the console
LOG_FILE = os.environ.get("LOG_FILE")
