"""Environment configuration for the chat service."""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

ENV = os.getenv("ENV")
ENV_IS_PROD = ENV == "prod"
COMMIT_HASH = os.getenv("COMMIT_HASH")
if not COMMIT_HASH and ENV_IS_PROD:
    raise ValueError("COMMIT_HASH is required for production environments")

APP_ADDR = os.getenv("HOST", "0.0.0.0")
APP_PORT = int(os.getenv("PORT", "8000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Database
DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is required")
SQL_DEBUG = os.getenv("SQL_DEBUG", "false").lower() == "true"

# Credentials shared with the REST authentication middleware
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    raise ValueError("JWT_SECRET environment variable is required")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
AUTH_COOKIE_NAME = os.getenv("AUTH_COOKIE_NAME", "token")

# Real-time messaging
NOTIFICATION_DEDUP_WINDOW_SECONDS = int(
    os.getenv("NOTIFICATION_DEDUP_WINDOW_SECONDS", "300")
)
NOTIFICATION_PREVIEW_LENGTH = int(os.getenv("NOTIFICATION_PREVIEW_LENGTH", "100"))
MAX_CONVERSATIONS_PER_CONNECTION = int(
    os.getenv("MAX_CONVERSATIONS_PER_CONNECTION", "500")
)
