# storage.py
# Simple JSON file storage helpers. Backs local mode when no webhooks are configured.

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"

FILES = {
    "reference": "reference.json",
    "submissions": "submissions.json",
}

DEFAULTS = {
    "reference": {"categories": [], "suppliersByCategory": {}, "materials": {}, "suppliers": []},
    "submissions": [],
}


def path_for(key: str) -> Path:
    return DATA_DIR / FILES[key]


def read_json(key: str):
    p = path_for(key)
    if not p.exists():
        return DEFAULTS[key]
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Could not read %s: %s", p, e)
        return DEFAULTS[key]


def write_json(key: str, obj: Any):
    p = path_for(key)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(obj, indent=2, default=str), encoding="utf-8")


def append_json(key: str, item: Any):
    items = list(read_json(key))
    items.append(item)
    write_json(key, items)
    return items
