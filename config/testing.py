import os

SECRET_KEY = "test-secret"
JWT_SECRET = "test-jwt-secret"
JWT_EXPIRES_MINUTES = 60

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "class_attendance_test"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

ADMIN_NAME = "Administrator"
ADMIN_EMAIL = ""
ADMIN_PASSWORD = ""

QR_DEFAULT_VALIDITY_MINUTES = 10

VAPID_PUBLIC_KEY = ""
VAPID_PRIVATE_KEY = ""
VAPID_CLAIM_EMAIL = ""

# Empty: host local time.
APP_TIMEZONE = ""

DAILY_CHECK_ENABLED = False
DAILY_CHECK_HOUR = 2
DAILY_CHECK_TIMEZONE = "Asia/Kuala_Lumpur"

CORS_ALLOWED_ORIGINS = "*"

LOG_LEVEL = "WARNING"
LOG_FILE = ""
