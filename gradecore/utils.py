import os
import re
import json
import logging
import unicodedata
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
DEFAULT_DATA_DIR = BASE_DIR / "data"

# path to an alternative rules.json
RULES_ENV = "GRADECORE_RULES"


def load_json(path: Path, default: Any):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return default
    except (OSError, ValueError) as e:
        logger.warning("could not read %s: %s", path, e)
        return default

def save_json(path: Path, obj: Any):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)

_DASH_CHARS_RE = re.compile(r"[\u2010\u2011\u2012\u2013\u2014\u2212]")
_NBSP_RE = re.compile(r"[\u00A0\u2007\u202F]")  # NBSP variants


def strip_accents(s: str) -> str:
    decomposed = unicodedata.normalize("NFKD", s)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def norm_text(s: Any) -> str:
    """
    Generic header/code normalization:
    - lower case, accents removed ("Evaluación" -> "evaluacion")
    - BOM and non-breaking spaces
    - outer quotes
    - every dash variant -> '-'
    - collapsed whitespace
    """
    if s is None:
        return ""

    s = str(s)

    # common invisible characters in CSV/Excel exports
    s = s.replace("\ufeff", "")
    s = _NBSP_RE.sub(" ", s)
    s = s.strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ('"', "'"):
        s = s[1:-1].strip()
    s = strip_accents(s).lower()
    s = _DASH_CHARS_RE.sub("-", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def cell_text(v: Any) -> Optional[str]:
    # tokenizer value -> trimmed text, or None for blank/NaN
    if v is None:
        return None
    if isinstance(v, float):
        if v != v:
            return None
        if v.is_integer():
            v = int(v)
    s = str(v).replace("\ufeff", "")
    s = _NBSP_RE.sub(" ", s).strip()
    if not s or s.lower() in ("nan", "none", "nat"):
        return None
    return s


def rules_path() -> Path:
    override = os.environ.get(RULES_ENV)
    if override:
        return Path(override)
    return DEFAULT_DATA_DIR / "rules.json"
