import os
import re
import sys
import json
import logging
from pathlib import Path
from typing import Any, Optional

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DATA_DIR = BASE_DIR / "data"

LOGGER_NAME = "roster"
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


def data_dir() -> Path:
    # ROSTER_DATA_DIR > %APPDATA%/RosterImport/data > <repo>/data
    env_dir = os.environ.get("ROSTER_DATA_DIR")
    if env_dir:
        return Path(env_dir)
    appdata = os.environ.get("APPDATA")
    if appdata:
        return Path(appdata) / "RosterImport" / "data"
    return DEFAULT_DATA_DIR

def load_json(path: Path, default: Any):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError):
        return default

def save_json(path: Path, obj: Any):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)

_DASH_CHARS_RE = re.compile(r"[\u2010\u2011\u2012\u2013\u2014\u2212]")
_NBSP_RE = re.compile(r"[\u00A0\u2007\u202F]")  # NBSP variants
_WS_RE = re.compile(r"\s+")


def collapse_ws(s: str) -> str:
    return _WS_RE.sub(" ", s or "").strip()

def norm_text(s: Any) -> str:
    """
    Text normalisation for lookups (spreadsheet keys, search):
    - lower
    - BOM / non-breaking spaces
    - outer quotes
    - every dash variant -> '-'
    - collapsed whitespace
    """
    if s is None:
        return ""

    s = str(s)

    # invisible characters that Excel/CSV exports like to carry
    s = s.replace("\ufeff", "")
    s = _NBSP_RE.sub(" ", s)
    s = s.strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ('"', "'"):
        s = s[1:-1].strip()
    s = s.lower()
    s = _DASH_CHARS_RE.sub("-", s)
    return collapse_ws(s)

def format_ymd(y: int, m: int, d: int) -> str:
    return f"{int(y):04d}-{int(m):02d}-{int(d):02d}"

def date_like_to_ymd(v: Any) -> Optional[str]:
    # pandas.Timestamp / datetime.date / datetime.datetime
    if v is None:
        return None
    if hasattr(v, "year") and hasattr(v, "month") and hasattr(v, "day"):
        try:
            return format_ymd(v.year, v.month, v.day)
        except (TypeError, ValueError):
            return None
    return None

def settings_path() -> Path:
    return data_dir() / "settings.json"

def load_settings() -> dict:
    settings = {"log_level": "INFO", "log_to_file": True}
    loaded = load_json(settings_path(), {})
    if isinstance(loaded, dict):
        settings.update(loaded)
    return settings

def students_path() -> Path:
    return data_dir() / "students.json"

def uploads_path() -> Path:
    return data_dir() / "uploads.json"

def log_path() -> Path:
    return data_dir() / "roster_import.log"

def setup_logging(level: str = "INFO", log_to_file: bool = True) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    if logger.handlers:
        return logger

    lvl = getattr(logging, str(level).upper(), logging.INFO)
    fmt = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    sh = logging.StreamHandler(sys.stdout)
    sh.setLevel(lvl)
    sh.setFormatter(fmt)
    logger.addHandler(sh)

    if log_to_file:
        path = log_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setLevel(lvl)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger
