# src/comtrade_share/config.py
from __future__ import annotations

import os

# ---------- API ----------

API_BASE = os.getenv("COMTRADE_API_BASE", "https://comtrade.un.org/api/get")
TIMEOUT = float(os.getenv("COMTRADE_TIMEOUT", "60"))
DEBUG = os.getenv("COMTRADE_DEBUG") == "1"

REPORTER = 392  # Japan
TRADE_FLOW = 1  # imports
FREQ = "A"
CLASSIFICATION = "HS"
ALL = "all"

# Partner codes: https://comtrade.un.org/Data/cache/partnerAreas.json
WORLD = 0
CANADA = 124
CANADA_TITLE = "Canada"
OTHER = "Other"

# ---------- partner discovery ----------

SHARE_DIVISOR = 20  # 5% of World trade
BATCH_SIZE = 5

# ---------- chart ----------

WIDTH = 600
HEIGHT = 250
DPI = 100
MARGIN = {"top": 5, "right": 5, "bottom": 20, "left": 40}

HIGHLIGHT_COLOR = "red"
OTHER_COLOR = "grey"
PALETTE = "Accent"
SMOOTH_SAMPLES = 8
