"""
Configuration Module
====================
Defines file paths, the CSV dialect, cleaning defaults and history
settings used throughout the tabular cleaning engine.

Values can be overridden through environment variables or a ``.env``
file at the project root.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Load .env file into os.environ (before any os.environ.get calls)
# ---------------------------------------------------------------------------
_project_root = Path(__file__).resolve().parent.parent
_env_file = _project_root / ".env"
_env_example = _project_root / ".env.example"

# Prefer .env; fall back to .env.example
if _env_file.exists():
    load_dotenv(dotenv_path=_env_file, override=False)
elif _env_example.exists():
    load_dotenv(dotenv_path=_env_example, override=False)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() == "true"


# ---------------------------------------------------------------------------
# Directory paths
# ---------------------------------------------------------------------------
BASE_DIR = _project_root
DATA_DIR = Path(os.environ.get("TABCLEAN_DATA_DIR", BASE_DIR / "data"))
OUTPUT_DIR = Path(os.environ.get("TABCLEAN_OUTPUT_DIR", DATA_DIR / "cleaned"))

# Job history (one JSON document holding every recorded cleaning job)
HISTORY_FILE = Path(os.environ.get("TABCLEAN_HISTORY_FILE", DATA_DIR / "job_history.json"))
HISTORY_LIMIT = int(os.environ.get("TABCLEAN_HISTORY_LIMIT", "20"))

# Suffix appended to the stem of a cleaned file: customers.csv -> customers-cleaned.csv
CLEANED_SUFFIX = "-cleaned"

# Only delimited text files are accepted as input
ALLOWED_EXTENSIONS = (".csv",)

# Encoding used to decode uploaded bytes and write outputs
TEXT_ENCODING = "utf-8"

# ---------------------------------------------------------------------------
# CSV dialect
# ---------------------------------------------------------------------------
CSV_DIALECT = {
    "delimiter": ",",
    "quotechar": '"',
    "lineterminator": "\r\n",
}

BYTE_ORDER_MARK = "\ufeff"

# ---------------------------------------------------------------------------
# Cleaning rules
# ---------------------------------------------------------------------------
# Sentinel written in place of missing values by handle_missing="fill"
FILL_VALUE = "N/A"

MISSING_STRATEGIES = ("keep", "drop", "fill")

DEFAULT_RULES = {
    "remove_duplicates": _env_flag("TABCLEAN_REMOVE_DUPLICATES"),
    "remove_empty_rows": _env_flag("TABCLEAN_REMOVE_EMPTY_ROWS"),
    "trim_whitespace": _env_flag("TABCLEAN_TRIM_WHITESPACE"),
    "handle_missing": os.environ.get("TABCLEAN_HANDLE_MISSING", "keep"),
}

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
