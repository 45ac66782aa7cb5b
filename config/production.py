import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "evals"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "evals_attendance"),
}

YEAR_START = os.getenv("YEAR_START", "")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTH_ENABLED = True
AUTH_USER_HEADER = os.getenv("AUTH_USER_HEADER", "X-Auth-User")
AUTH_GROUPS_HEADER = os.getenv("AUTH_GROUPS_HEADER", "X-Auth-Groups")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
