import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "company_management"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: create the founder account on startup when FOUNDER_EMAIL is set
FOUNDER_NAME = os.getenv("FOUNDER_NAME", "Founder")
FOUNDER_EMAIL = os.getenv("FOUNDER_EMAIL", "")
FOUNDER_PASSWORD = os.getenv("FOUNDER_PASSWORD", "")

# Bearer tokens
JWT_SECRET = os.getenv("JWT_SECRET", SECRET_KEY)
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", str(7 * 24 * 60)))

# Task submissions
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads/task-submissions")
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "10"))

# Attendance & performance scoring
COMPANY_TIMEZONE = os.getenv("COMPANY_TIMEZONE", "UTC")
LATE_LOGIN_THRESHOLD = os.getenv("LATE_LOGIN_THRESHOLD", "09:30")
TASK_COMPLETED_POINTS = int(os.getenv("TASK_COMPLETED_POINTS", "10"))
LATE_LOGIN_POINTS = int(os.getenv("LATE_LOGIN_POINTS", "-5"))
HALF_DAY_MINUTES = int(os.getenv("HALF_DAY_MINUTES", "240"))
