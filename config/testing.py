import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "company_management_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
FOUNDER_NAME = "Founder"
FOUNDER_EMAIL = ""
FOUNDER_PASSWORD = ""

JWT_SECRET = "test-jwt-secret"
JWT_EXPIRE_MINUTES = 60

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads/test")
MAX_UPLOAD_MB = 1

COMPANY_TIMEZONE = "UTC"
LATE_LOGIN_THRESHOLD = "09:30"
TASK_COMPLETED_POINTS = 10
LATE_LOGIN_POINTS = -5
HALF_DAY_MINUTES = 240
