import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "company_management"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
FOUNDER_NAME = os.getenv("FOUNDER_NAME", "Founder")
FOUNDER_EMAIL = os.getenv("FOUNDER_EMAIL", "")
FOUNDER_PASSWORD = os.getenv("FOUNDER_PASSWORD", "")

JWT_SECRET = os.getenv("JWT_SECRET", SECRET_KEY)
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", "1440"))

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "/var/lib/company-management/uploads")
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "10"))

COMPANY_TIMEZONE = os.getenv("COMPANY_TIMEZONE", "UTC")
LATE_LOGIN_THRESHOLD = os.getenv("LATE_LOGIN_THRESHOLD", "09:30")
TASK_COMPLETED_POINTS = int(os.getenv("TASK_COMPLETED_POINTS", "10"))
LATE_LOGIN_POINTS = int(os.getenv("LATE_LOGIN_POINTS", "-5"))
HALF_DAY_MINUTES = int(os.getenv("HALF_DAY_MINUTES", "240"))
