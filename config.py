import os

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

PORT = int(os.getenv("PORT", "3000"))
HOST = os.getenv("HOST", "0.0.0.0")
DEBUG = os.getenv("DEBUG", "").lower() in ("1", "true", "yes")

# File-backed variant
DATA_DIR = os.getenv("DATA_DIR", os.path.join(BASE_DIR, "data"))
PUBLIC_DIR = os.getenv("PUBLIC_DIR", os.path.join(BASE_DIR, "public"))

# Database-backed variant, e.g. sqlite:///learning.db
DATABASE_URL = os.getenv("DATABASE_URL", "")

MAX_CONTENT_LENGTH = 1024 * 1024


def flask_config():
    return {
        "DATA_DIR": DATA_DIR,
        "PUBLIC_DIR": PUBLIC_DIR,
        "DATABASE_URL": DATABASE_URL,
        "MAX_CONTENT_LENGTH": MAX_CONTENT_LENGTH,
    }
