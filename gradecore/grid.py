from __future__ import annotations
import re
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .config import EngineConfig
from .errors import EmptyInput, InputError
from .utils import cell_text, norm_text

logger = logging.getLogger(__name__)

NUMERIC_RE = re.compile(r"^\s*[-+]?\d+([.,]\d+)?\s*$")
FRACTION_RE = re.compile(r"^\s*\d+([.,]\d+)?\s*/\s*\d+([.,]\d+)?\s*$")

# keywords typical for the header row of a gradebook export
HEADER_KWS = [
    "#", "no.", "n°", "carnet", "carne", "codigo", "matricula",
    "alumno", "estudiante", "nombre", "apellido",
    "correo", "email", "e-mail",
    "grupo", "group", "seccion",
    "parcial", "examen", "quiz", "tarea", "laboratorio", "lab", "proyecto", "practica",
    "acum", "total", "final", "nota", "estado",
]


@dataclass(frozen=True)
class RawGrid:
    """
    Header row plus rows of optional text cells, as produced by a tokenizer.

    Rows may be shorter or longer than the header (ragged exports).
    """
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[Optional[str], ...], ...]

    @classmethod
    def of(cls, headers: Sequence[Any], rows: Sequence[Sequence[Optional[Any]]]) -> "RawGrid":
        return cls(
            headers=tuple("" if h is None else str(h) for h in headers),
            rows=tuple(tuple(None if c is None else str(c) for c in r) for r in rows),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"headers": list(self.headers), "rows": [list(r) for r in self.rows]}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RawGrid":
        return cls.of(d.get("headers", []), d.get("rows", []))


# =========================
# Header row detection (already tokenized matrix)
# =========================
def _row_keyword_score(row: Sequence[Any]) -> float:
    score = 0.0
    for v in row:
        s = norm_text(cell_text(v))
        if not s:
            continue
        for k in HEADER_KWS:
            if s == k or s.startswith(k):
                score += 1.0
                break
    return score


def _row_dataish_score(row: Sequence[Any]) -> float:
    # data rows carry numbers, fractions and e-mails rather than keywords
    score = 0.0
    for v in row:
        s = cell_text(v)
        if s is None:
            continue
        if NUMERIC_RE.match(s) or FRACTION_RE.match(s):
            score += 1.0
        elif "@" in s:
            score += 1.0
    return score


def _find_key_header_row(matrix: Sequence[Sequence[Any]], config: EngineConfig, max_scan_rows: int) -> Optional[int]:
    key = norm_text(config.key_header)
    col = config.field_index("identifier")
    if not key or col is None:
        return None
    for i, row in enumerate(matrix[:max_scan_rows]):
        if len(row) > col and norm_text(cell_text(row[col])) == key:
            return i
    return None


def detect_header_row(
    matrix: Sequence[Sequence[Any]],
    config: Optional[EngineConfig] = None,
    max_scan_rows: int = 40,
) -> int:
    """
    Return the 0-based index of the header row.

    The row carrying the key header (CARNET) in the identifier column wins;
    otherwise the row with the best keyword score, preferring rows followed
    by data-like rows and rows near the top.
    """
    config = config or EngineConfig()
    found = _find_key_header_row(matrix, config, max_scan_rows)
    if found is not None:
        return found

    n = min(max_scan_rows, len(matrix))
    best: Optional[int] = None
    best_score = 0.0
    for i in range(n):
        kw = _row_keyword_score(matrix[i])
        if kw < 2:
            continue
        after = matrix[i + 1:i + 4]
        after_data = sum(_row_dataish_score(r) for r in after)
        after_kw = sum(_row_keyword_score(r) for r in after)
        score = 2.0 * kw + 0.5 * after_data - 0.8 * after_kw - 0.3 * i
        if best is None or score > best_score:
            best = i
            best_score = score

    if best is None:
        raise InputError("could not locate a header row")
    return best


def grid_from_matrix(
    matrix: Sequence[Sequence[Any]],
    config: Optional[EngineConfig] = None,
    max_scan_rows: int = 40,
) -> RawGrid:
    """
    Build a RawGrid from a tokenized matrix (rows of arbitrary cell values).

    Blank header cells are dropped, so the data rows may lead or trail the
    header by a column; EngineConfig.row_offset accounts for that. Data rows
    end at the first row whose first cell is blank.
    """
    if not matrix:
        raise EmptyInput("matrix is empty")

    start = detect_header_row(matrix, config, max_scan_rows=max_scan_rows)
    headers = [h for h in (cell_text(v) for v in matrix[start]) if h is not None]

    rows: List[Tuple[Optional[str], ...]] = []
    for row in matrix[start + 1:]:
        if not row or cell_text(row[0]) is None:
            break
        rows.append(tuple(cell_text(v) for v in row))

    logger.debug("header at row %d, %d columns, %d data rows", start, len(headers), len(rows))
    if not rows:
        raise EmptyInput("no data rows below the header")
    return RawGrid(headers=tuple(headers), rows=tuple(rows))


def grid_from_dataframe(
    df_raw: pd.DataFrame,
    config: Optional[EngineConfig] = None,
    max_scan_rows: int = 40,
) -> RawGrid:
    # header-less frame (header=None); the _origin_row bookkeeping column is ignored
    df = df_raw.drop(columns=["_origin_row"]) if "_origin_row" in df_raw.columns else df_raw
    if df.empty:
        raise EmptyInput("data frame is empty")
    matrix = df.astype(object).where(pd.notna(df), None).values.tolist()
    return grid_from_matrix(matrix, config, max_scan_rows=max_scan_rows)
