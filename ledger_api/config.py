import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///ledger.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

APP_LOG_LEVEL = os.getenv("APP_LOG_LEVEL", "INFO")
THIRD_PARTY_LOG_LEVEL = os.getenv("THIRD_PARTY_LOG_LEVEL", "WARNING")
LOG_FILE = os.getenv("LOG_FILE")

# Pagination defaults for list endpoints
DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "100"))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "500"))

# Longest parent chain a category tree may have
MAX_CATEGORY_DEPTH = int(os.getenv("MAX_CATEGORY_DEPTH", "32"))
