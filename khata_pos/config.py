import os
from pathlib import Path

from .constants import DATA_DIR, LOG_DIR, TEMPLATES_DIR

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = Path(os.environ.get("KHATA_POS_DATA_DIR", BASE_DIR.parent / DATA_DIR))
LOG_PATH = Path(os.environ.get("KHATA_POS_LOG_DIR", BASE_DIR.parent / LOG_DIR))
TEMPLATES_PATH = BASE_DIR / TEMPLATES_DIR

# Image classification endpoint for visual product search (optional)
VISION_URL = os.environ.get("KHATA_POS_VISION_URL", "")
VISION_API_KEY = os.environ.get("KHATA_POS_VISION_KEY", "")
VISION_TIMEOUT = float(os.environ.get("KHATA_POS_VISION_TIMEOUT", "20"))

# Estimates currently move stock and post Khata like Final bills.
ESTIMATES_AFFECT_STOCK = os.environ.get(
    "KHATA_POS_ESTIMATES_AFFECT_STOCK", "1"
).strip().lower() not in ("0", "false", "no")
