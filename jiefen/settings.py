"""
Settings and configuration for Jiefen.

Paths to the packaged dictionary and HMM tables, plus the numeric
constants shared by the scoring code. Every path can be overridden
through an environment variable.
"""

import os
from pathlib import Path
from typing import Optional

# Data directory paths
PACKAGE_DIR = Path(__file__).parent
DATA_DIR = PACKAGE_DIR / "data"

# Main dictionary ("word freq [tag]" per line)
DEFAULT_DICT_PATH = DATA_DIR / "dict.txt"
DICT_PATH = Path(os.environ.get("JIEFEN_DICT_PATH", DEFAULT_DICT_PATH))

# HMM parameter tables (prob_start.json, prob_trans.json, prob_emit.json,
# and char_state_tab.json for the tagging model)
FINALSEG_DIR = Path(os.environ.get("JIEFEN_FINALSEG_DIR", DATA_DIR / "finalseg"))
POSSEG_DIR = Path(os.environ.get("JIEFEN_POSSEG_DIR", DATA_DIR / "posseg"))


def _optional_path(name: str) -> Optional[Path]:
    value = os.environ.get(name)
    return Path(value) if value else None


# Compiled dictionary cache (SQLite). Disabled unless set.
CACHE_PATH = _optional_path("JIEFEN_CACHE_PATH")

# Debug mode
DEBUG = os.environ.get("JIEFEN_DEBUG", "").lower() in ("1", "true", "yes")

# Emission floor for unseen (state, character) pairs
MIN_PROB = -3.14e100

# Score of a transition absent from the table
MIN_INF = float("-inf")

# Tag given to words missing from the word-tag table
DEFAULT_TAG = "x"

# Boundary labels whose position closes a word
END_BOUNDARIES = ("E", "S")

# Thread count for batch cuts (None lets the executor decide)
DEFAULT_WORKERS = int(os.environ["JIEFEN_WORKERS"]) if os.environ.get("JIEFEN_WORKERS") else None
