from __future__ import annotations
import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from .cells import Fraction, max_value
from .table import AcademicTable


def _opt(x: Any) -> Optional[float]:
    # NaN/None -> None, numpy scalars -> float
    if x is None:
        return None
    v = float(x)
    return None if math.isnan(v) else v


@dataclass(frozen=True)
class StudentStatistics:
    identifier: str
    display_name: str
    group: str
    accumulated_score: Optional[float]
    std_dev: Optional[float]
    percentile: Optional[float]
    lost_points: Optional[float]


@dataclass(frozen=True)
class EvaluationStatistics:
    index: int
    name: str
    average: Optional[float]
    std_dev: Optional[float]
    highest_score: Optional[float]
    lowest_score: Optional[float]
    max_possible_score: Optional[float]
    evaluated_count: int
    missing_count: int


@dataclass(frozen=True)
class Statistics:
    students: Tuple[StudentStatistics, ...]
    evaluations: Tuple[EvaluationStatistics, ...]

    @property
    def accumulated_possible_points(self) -> float:
        # evaluations without a discovered maximum are left out, not counted as 0
        return float(sum(e.max_possible_score for e in self.evaluations if e.max_possible_score is not None))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "students": [asdict(s) for s in self.students],
            "evaluations": [asdict(e) for e in self.evaluations],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Statistics":
        return cls(
            students=tuple(StudentStatistics(**s) for s in d.get("students", [])),
            evaluations=tuple(EvaluationStatistics(**e) for e in d.get("evaluations", [])),
        )


# =========================

# Per student
# =========================
def percentiles(scores: pd.Series) -> pd.Series:
    """
    Percentile rank among defined scores: rank / (N - 1) * 100, ascending.
    Ties keep table order; a lone score gets 100; undefined scores stay NaN.
    """
    n = int(scores.notna().sum())
    rank = scores.rank(method="first", ascending=True, na_option="keep")
    if n <= 1:
        return rank.where(rank.isna(), 100.0)
    return (rank - 1.0) / (n - 1) * 100.0


def lost_points(grades) -> Optional[float]:
    # None when the student has no Fraction at all; a zero total contributes nothing
    fractions = [g for g in grades if isinstance(g, Fraction)]
    if not fractions:
        return None
    return float(sum(g.total - g.obtained for g in fractions if g.total > 0))


def _student_statistics(table: AcademicTable, frame: pd.DataFrame) -> List[StudentStatistics]:
    accumulated = frame.sum(axis=1, min_count=1)
    spread = frame.std(axis=1, ddof=1)
    pct = percentiles(accumulated)

    out = []
    for i, r in enumerate(table.records):
        out.append(StudentStatistics(
            identifier=r.identifier,
            display_name=r.display_name,
            group=r.group,
            accumulated_score=_opt(accumulated.iloc[i]),
            std_dev=_opt(spread.iloc[i]),
            percentile=_opt(pct.iloc[i]),
            lost_points=lost_points(r.grades),
        ))
    return out


# =========================

# Per evaluation
# =========================
def discovered_maximum(table: AcademicTable, j: int) -> Optional[float]:
    # first positive Fraction total in student order
    for r in table.records:
        m = max_value(r.grades[j])
        if m is not None:
            return m
    return None


def _evaluation_statistics(table: AcademicTable, frame: pd.DataFrame) -> List[EvaluationStatistics]:
    mean = frame.mean(axis=0)
    spread = frame.std(axis=0, ddof=1)
    hi = frame.max(axis=0)
    lo = frame.min(axis=0)
    counts = frame.count(axis=0)

    out = []
    for j, name in enumerate(table.evaluation_names):
        evaluated = int(counts.iloc[j])
        out.append(EvaluationStatistics(
            index=j,
            name=name,
            average=_opt(mean.iloc[j]),
            std_dev=_opt(spread.iloc[j]),
            highest_score=_opt(hi.iloc[j]),
            lowest_score=_opt(lo.iloc[j]),
            max_possible_score=discovered_maximum(table, j),
            evaluated_count=evaluated,
            missing_count=table.student_count - evaluated,
        ))
    return out


def compute_statistics(table: AcademicTable) -> Statistics:
    """
    Per-student and per-evaluation statistics of a normalized table.

    Pure: the table is only read, and the same table always yields the same
    result. Only Numeric and Fraction cells carry points; Absent, Withdrawn
    and Label cells are left out of every sum, average and extreme.
    """
    frame = table.raw_frame()
    return Statistics(
        students=tuple(_student_statistics(table, frame)),
        evaluations=tuple(_evaluation_statistics(table, frame)),
    )
