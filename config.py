import logging
import os
import sys

import dotenv

# Load .env once so every module sees the same settings.
dotenv.load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _env_float(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


API_BASE_URL = os.getenv('POS_API_BASE_URL', 'https://zaidawn.site/wp-json/ims/v1').rstrip('/')
API_TOKEN = os.getenv('POS_API_TOKEN') or None
REQUEST_TIMEOUT = _env_float('POS_REQUEST_TIMEOUT', 10.0)

# Flat rate applied after discount in the sales flow
TAX_RATE = _env_float('POS_TAX_RATE', 0.10)

DB_PATH = os.getenv('POS_DB_PATH') or os.path.join(BASE_DIR, 'pos_preferences.db')
RECEIPTS_DIR = os.getenv('POS_RECEIPTS_DIR') or os.path.join(BASE_DIR, 'receipts')

STORE_NAME = os.getenv('POS_STORE_NAME', 'Hardware Store')
STORE_ADDRESS = os.getenv('POS_STORE_ADDRESS', '')
STORE_PHONE = os.getenv('POS_STORE_PHONE', '')
CURRENCY = os.getenv('POS_CURRENCY', 'Rs.')

LOG_LEVEL = os.getenv('POS_LOG_LEVEL', 'INFO').upper()


def setup_logging(level=None):
    logging.basicConfig(
        level=level or LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
