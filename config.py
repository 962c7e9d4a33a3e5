import os

PORT = int(os.getenv("PORT", 5000))
PYTHON_ENV = os.getenv("PYTHON_ENV", "development").lower()
IS_PRODUCTION = PYTHON_ENV == "production"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Database
DB_USER = os.getenv("DB_USER")
DB_PASS = os.getenv("DB_PASS")
DB_CLUSTER = os.getenv("DB_CLUSTER", "cluster0.jcpqyde.mongodb.net")
DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "groupStudyDB")

# Auth
ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "")
TOKEN_COOKIE_NAME = "token"
TOKEN_LIFETIME_HOURS = 10

CORS_ORIGINS = [
    "http://localhost:5173",
    "https://study-group-83e71.web.app",
    "https://study-group-83e71.firebaseapp.com",
]
