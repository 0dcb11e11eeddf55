import logging
import os

from dotenv import load_dotenv

load_dotenv()


def _split(value: str):
    return [v.strip() for v in value.split(",") if v.strip()]


DATABASE_URL = os.getenv("BISTRO_DATABASE_URL", "sqlite:///./bistro.db")

# Comma-separated; empty means every caller is admitted
ALLOWED_EMAILS = _split(os.getenv("BISTRO_ALLOWED_EMAILS", ""))

CORS_ORIGINS = _split(os.getenv("BISTRO_CORS_ORIGINS", "*")) or ["*"]

LOG_LEVEL = os.getenv("BISTRO_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

EXPIRY_WARNING_DAYS = int(os.getenv("BISTRO_EXPIRY_WARNING_DAYS", "7"))


def configure_logging(level: str = None):
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
