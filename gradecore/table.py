from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .cells import GradeValue, interpret, raw_value, grade_to_dict, grade_from_dict
from .config import EngineConfig
from .errors import EmptyInput, InputError, MissingIdentityField
from .grid import RawGrid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudentRecord:
    identifier: str
    display_name: str
    contact: str
    group: str
    grades: Tuple[GradeValue, ...]
    final_grade: GradeValue

    def to_dict(self) -> Dict[str, Any]:
        return {
            "carnet": self.identifier,
            "name": self.display_name,
            "email": self.contact,
            "group": self.group,
            "grades": [grade_to_dict(g) for g in self.grades],
            "final_grade": grade_to_dict(self.final_grade),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StudentRecord":
        return cls(
            identifier=str(d.get("carnet", "")),
            display_name=str(d.get("name", "")),
            contact=str(d.get("email", "")),
            group=str(d.get("group", "")),
            grades=tuple(grade_from_dict(g) for g in d.get("grades", [])),
            final_grade=grade_from_dict(d.get("final_grade", {"status": "Absent"})),
        )


@dataclass(frozen=True)
class AcademicTable:
    """
    Normalized gradebook: evaluation names plus one record per student.

    Every record's grades are index-aligned with evaluation_names.
    """
    evaluation_names: Tuple[str, ...]
    records: Tuple[StudentRecord, ...]

    def __post_init__(self):
        n = len(self.evaluation_names)
        for i, r in enumerate(self.records):
            if len(r.grades) != n:
                raise ValueError(f"record {i} has {len(r.grades)} grades, expected {n}")

    @property
    def student_count(self) -> int:
        return len(self.records)

    @property
    def evaluation_count(self) -> int:
        return len(self.evaluation_names)

    def raw_frame(self) -> pd.DataFrame:
        # students x evaluations of extractable points, NaN where a cell has none
        mat = np.full((self.student_count, self.evaluation_count), np.nan)
        for i, r in enumerate(self.records):
            for j, g in enumerate(r.grades):
                v = raw_value(g)
                if v is not None:
                    mat[i, j] = v
        return pd.DataFrame(mat, columns=range(self.evaluation_count))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "evaluation_names": list(self.evaluation_names),
            "records": [r.to_dict() for r in self.records],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AcademicTable":
        return cls(
            evaluation_names=tuple(str(x) for x in d.get("evaluation_names", [])),
            records=tuple(StudentRecord.from_dict(r) for r in d.get("records", [])),
        )


# =========================

# Raw grid -> academic table
# =========================
def evaluation_columns(headers: Tuple[str, ...], config: EngineConfig) -> List[int]:
    """
    Header indices of the regular evaluations: strictly between the identity
    block and the terminal (final grade) column, summary columns excluded.
    """
    final_idx = len(headers) - 1
    out = []
    for i in range(config.identity_columns, final_idx):
        if config.is_summary_header(headers[i]):
            logger.debug("summary column skipped: %r", headers[i])
            continue
        out.append(i)
    return out


def normalize(grid: RawGrid, config: Optional[EngineConfig] = None) -> AcademicTable:
    """
    Build the academic table from a raw grid.

    Rows too short to hold the identity block are skipped. A row missing a
    required identity cell aborts the whole table with MissingIdentityField.
    """
    config = config or EngineConfig()
    if not grid.rows:
        raise EmptyInput()

    headers = grid.headers
    if len(headers) < config.identity_columns + 1:
        raise InputError(
            f"header row has {len(headers)} columns, expected at least {config.identity_columns + 1}"
        )

    offset = config.row_offset
    final_idx = len(headers) - 1
    eval_idx = evaluation_columns(headers, config)
    min_len = config.identity_columns + offset

    def read(row, i: int) -> Optional[str]:
        j = i + offset
        return row[j] if j < len(row) else None

    def grade(row, i: int) -> GradeValue:
        return interpret(read(row, i), config.absent_codes, config.withdrawn_codes)

    records: List[StudentRecord] = []
    skipped = 0
    for row_index, row in enumerate(grid.rows):
        if len(row) < min_len:
            skipped += 1
            logger.debug("row %d skipped: %d cells, identity block needs %d", row_index, len(row), min_len)
            continue

        ident: Dict[str, str] = {}
        for name, idx in config.identity_fields:
            v = read(row, idx)
            ident[name] = v.strip() if v is not None else ""

        for name in config.required_fields:
            if not ident.get(name):
                idx = config.field_index(name)
                column = headers[idx] if idx is not None and idx < len(headers) else ""
                raise MissingIdentityField(row_index, name, column)

        records.append(StudentRecord(
            identifier=ident.get("identifier", ""),
            display_name=ident.get("display_name", ""),
            contact=ident.get("contact", ""),
            group=ident.get("group", ""),
            grades=tuple(grade(row, i) for i in eval_idx),
            final_grade=grade(row, final_idx),
        ))

    if not records:
        raise EmptyInput(f"all {skipped} rows are shorter than the identity block")

    logger.info("normalized %d students x %d evaluations (%d rows skipped)", len(records), len(eval_idx), skipped)
    return AcademicTable(
        evaluation_names=tuple(headers[i] for i in eval_idx),
        records=tuple(records),
    )
