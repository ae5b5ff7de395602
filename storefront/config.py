# storefront/config.py
import os
import logging
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent

class Config:
    """Configuration settings for the storefront"""

    # Store settings
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "postgres").lower()
    if STORE_BACKEND not in ("postgres", "memory"):
        raise ValueError(f"Unknown STORE_BACKEND: {STORE_BACKEND}")

    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    if STORE_BACKEND == "postgres" and not DATABASE_URL:
        raise ValueError("No DATABASE_URL set in environment")

    DB_POOL_MIN_SIZE: int = int(os.getenv("DB_POOL_MIN_SIZE", "2"))
    DB_POOL_MAX_SIZE: int = int(os.getenv("DB_POOL_MAX_SIZE", "10"))

    # Payment settings
    PAYMENT_GATEWAY_URL: str = os.getenv("PAYMENT_GATEWAY_URL", "")
    PAYMENT_API_KEY: str = os.getenv("PAYMENT_API_KEY", "")
    PAYMENT_TIMEOUT: float = float(os.getenv("PAYMENT_TIMEOUT", "15"))

    # Checkout settings
    CURRENCY: str = os.getenv("CURRENCY", "GBP")
    DEFAULT_COUNTRY: str = os.getenv("DEFAULT_COUNTRY", "GB")

    # Other settings
    TIMEZONE: str = os.getenv("TZ", "Europe/London")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Paths
    LOG_DIR = Path(os.getenv("LOG_DIR", BASE_DIR / "logs"))
    SEED_FILE: str = os.getenv("SEED_FILE", "")

def setup_logging():
    """Configure logging settings"""
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    Config.LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = Config.LOG_DIR / "storefront.log"

    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
        format=log_format,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )
