# sealpad/config.py

import os

# =========================
# DATABASE
# =========================

# SQLite file by default; point DATABASE_URL at PostgreSQL in production
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./sealpad.sqlite")
DB_ECHO = os.getenv("DB_ECHO", "false").lower() in ("1", "true", "yes")

# =========================
# SERVER
# =========================

SWEEP_INTERVAL_SECONDS = float(os.getenv("SWEEP_INTERVAL_SECONDS", "60"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
NOTE_WRITE_LIMIT = os.getenv("NOTE_WRITE_LIMIT", "60/minute")

# =========================
# CLIENT
# =========================

SERVER_URL = os.getenv("SEALPAD_SERVER_URL", "http://127.0.0.1:8000")
