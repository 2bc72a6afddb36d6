# settings.py
# Environment-driven configuration. Empty webhook URLs switch the backend to local mode.
import os
import time
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

DATA_LOAD_WEBHOOK = os.getenv("DATA_LOAD_WEBHOOK", "")
ORDER_SUBMIT_WEBHOOK = os.getenv("ORDER_SUBMIT_WEBHOOK", "")
QUOTE_SUBMIT_WEBHOOK = os.getenv("QUOTE_SUBMIT_WEBHOOK", "")
ORDER_HISTORY_WEBHOOK = os.getenv("ORDER_HISTORY_WEBHOOK", "")

WEBHOOK_TIMEOUT = float(os.getenv("WEBHOOK_TIMEOUT", "45"))

STATIC_DIR = Path(os.getenv("STATIC_DIR", str(BASE_DIR / "static")))
SCRIPT_ASSETS = ("script.js",)
STYLE_ASSETS = ("styles.css",)

# numeric cache-busting version; defaults to process start
ASSET_VERSION = int(os.getenv("ASSET_VERSION") or time.time())

APP_ENV = os.getenv("APP_ENV", "development")
APP_VERSION = os.getenv("APP_VERSION", "2.0.0")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def webhooks():
    return {
        "dataLoad": DATA_LOAD_WEBHOOK,
        "orderSubmit": ORDER_SUBMIT_WEBHOOK,
        "quoteSubmit": QUOTE_SUBMIT_WEBHOOK,
        "orderHistory": ORDER_HISTORY_WEBHOOK,
    }
