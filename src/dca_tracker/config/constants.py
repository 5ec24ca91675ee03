"""Global configuration constants for DCA Tracker.

These values are intentionally free of any display concerns so they
can be reused by services, the report entry point, and scripts.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base directory for data files (defaults to project root, overridable per user)
BASE_DIR = Path(os.environ.get("DCA_TRACKER_HOME") or Path(__file__).resolve().parents[3])

# --- File paths ---
DATA_FILE = str(BASE_DIR / "dca_transactions.json")
SETTINGS_FILE = str(BASE_DIR / "dca_settings.json")
PRICE_CACHE_FILE = str(BASE_DIR / "price_cache.json")
EXPORT_FILE_NAME = "wav-dca-transactions.json"

# API endpoints
COINGECKO_API_URL = "https://api.coingecko.com/api/v3/simple/price"
VS_CURRENCY = "eur"
REQUEST_TIMEOUT = 5
PRICE_CACHE_MAX_AGE_MINUTES = 5.0

# Lots at or below this remaining quantity are treated as fully consumed
LOT_EPSILON = 1e-8

TRANSACTION_TYPES = ["BUY", "SELL"]
PLATFORMS = ["Crypto.com", "Bitget", "Autre"]
DEFAULT_PLATFORM = "Crypto.com"

# Presale tokens without a public price; the user maintains these by hand
DEFAULT_MANUAL_PRICES = {
    "RTX": 0.0042,
    "LBRETT": 0.0042,
}

# Speculative positions watched by the exit rule (sell part once price doubles)
EXIT_RULE_ASSETS = ["RTX", "LBRETT"]
EXIT_RULE_MULTIPLE = 2.0
