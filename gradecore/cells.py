from __future__ import annotations
import re
import math
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Union

from .utils import norm_text

logger = logging.getLogger(__name__)

# "9", "-1.5", "7,25", ".5"; a comma takes at most two decimals ("1,000" is not 1.0)
_NUMERIC_RE = re.compile(r"^[-+]?(?:\d+(?:\.\d*|,\d{0,2})?|\.\d+|,\d{1,2})$")

DEFAULT_ABSENT_CODES = ("NP",)
DEFAULT_WITHDRAWN_CODES = ("RM",)


@dataclass(frozen=True)
class Numeric:
    value: float


@dataclass(frozen=True)
class Fraction:
    # total == 0 means "no usable maximum"; nothing ever divides by it
    obtained: float
    total: float


@dataclass(frozen=True)
class Withdrawn:
    pass


@dataclass(frozen=True)
class Absent:
    pass


@dataclass(frozen=True)
class Label:
    text: str


GradeValue = Union[Numeric, Fraction, Withdrawn, Absent, Label]

ABSENT = Absent()
WITHDRAWN = Withdrawn()


def _parse_number(s: str) -> Optional[float]:
    s = s.strip()
    if not _NUMERIC_RE.match(s):
        return None
    value = float(s.replace(",", "."))
    # long digit runs overflow to inf
    return value if math.isfinite(value) else None


def interpret(
    cell: Optional[str],
    absent_codes: Iterable[str] = DEFAULT_ABSENT_CODES,
    withdrawn_codes: Iterable[str] = DEFAULT_WITHDRAWN_CODES,
) -> GradeValue:
    """
    Turn one optional text cell into a grade value. Never raises.

    Precedence (trimmed, case-insensitive):
      1) empty / None / absence code  -> Absent
      2) withdrawal code              -> Withdrawn
      3) exactly one '/'              -> Fraction (a side that fails to parse
                                         becomes 0 for the numerator, 1 for the
                                         denominator)
      4) a single number              -> Numeric
      5) anything else                -> Label(upper-cased text)
    """
    if cell is None:
        return ABSENT
    text = str(cell).strip()
    if not text:
        return ABSENT

    code = norm_text(text)
    if code in {norm_text(c) for c in absent_codes}:
        return ABSENT
    if code in {norm_text(c) for c in withdrawn_codes}:
        return WITHDRAWN

    if text.count("/") == 1:
        left, right = text.split("/")
        obtained = _parse_number(left)
        total = _parse_number(right)
        if obtained is None or total is None:
            logger.debug("lenient fraction parse for %r", text)
        return Fraction(
            obtained=obtained if obtained is not None else 0.0,
            total=total if total is not None else 1.0,
        )

    value = _parse_number(text)
    if value is not None:
        return Numeric(value)

    return Label(text.upper())


def raw_value(grade: GradeValue) -> Optional[float]:
    # the points a cell contributes to sums and averages
    if isinstance(grade, Numeric):
        return grade.value
    if isinstance(grade, Fraction):
        return grade.obtained
    return None


def max_value(grade: GradeValue) -> Optional[float]:
    # usable maximum of a cell: only a Fraction with a positive total has one
    if isinstance(grade, Fraction) and grade.total > 0:
        return grade.total
    return None


def display(grade: GradeValue) -> str:
    if isinstance(grade, Numeric):
        return f"{grade.value:g}"
    if isinstance(grade, Fraction):
        return f"{grade.obtained:g}/{grade.total:g}"
    if isinstance(grade, Withdrawn):
        return "RM"
    if isinstance(grade, Absent):
        return ""
    return grade.text


# =========================

# Serialization: {"status": <variant>, "value": ...}
# =========================
def grade_to_dict(grade: GradeValue) -> Dict[str, Any]:
    if isinstance(grade, Numeric):
        return {"status": "Numeric", "value": grade.value}
    if isinstance(grade, Fraction):
        return {"status": "Fraction", "value": {"obtained": grade.obtained, "total": grade.total}}
    if isinstance(grade, Withdrawn):
        return {"status": "Withdrawn"}
    if isinstance(grade, Absent):
        return {"status": "Absent"}
    if isinstance(grade, Label):
        return {"status": "Label", "value": grade.text}
    raise TypeError(f"not a grade value: {grade!r}")


def grade_from_dict(d: Dict[str, Any]) -> GradeValue:
    status = d.get("status")
    if status == "Numeric":
        return Numeric(float(d["value"]))
    if status == "Fraction":
        v = d["value"]
        return Fraction(float(v["obtained"]), float(v["total"]))
    if status == "Withdrawn":
        return WITHDRAWN
    if status == "Absent":
        return ABSENT
    if status == "Label":
        return Label(str(d["value"]))
    raise ValueError(f"unknown grade status: {status!r}")
