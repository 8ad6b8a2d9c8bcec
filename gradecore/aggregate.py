from __future__ import annotations
import math
import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, Optional, Sequence

from .config import EngineConfig
from .rules import AcademicStatus, StatusPolicy, DEFAULT_POLICY
from .stats import Statistics, StudentStatistics, discovered_maximum
from .table import AcademicTable

logger = logging.getLogger(__name__)


@dataclass
class Welford:
    """Single-pass running mean and sample variance."""
    count: int = 0
    mean: float = 0.0
    m2: float = 0.0

    def push(self, x: float) -> None:
        self.count += 1
        delta = x - self.mean
        self.mean += delta / self.count
        self.m2 += delta * (x - self.mean)

    def extend(self, xs: Iterable[float]) -> "Welford":
        for x in xs:
            self.push(x)
        return self

    @property
    def average(self) -> Optional[float]:
        return self.mean if self.count > 0 else None

    @property
    def std_dev(self) -> Optional[float]:
        if self.count < 2:
            return None
        return math.sqrt(self.m2 / (self.count - 1))


@dataclass(frozen=True)
class ClassSummary:
    student_count: int
    accumulated_possible_points: float
    overall_average: Optional[float]
    overall_std_dev: Optional[float]
    approved_count: int = 0
    on_track_count: int = 0
    warning_count: int = 0
    critical_count: int = 0
    failed_count: int = 0

    def count_for(self, status: AcademicStatus) -> int:
        return {
            AcademicStatus.APPROVED: self.approved_count,
            AcademicStatus.ON_TRACK: self.on_track_count,
            AcademicStatus.WARNING: self.warning_count,
            AcademicStatus.CRITICAL: self.critical_count,
            AcademicStatus.FAILED: self.failed_count,
        }[status]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ClassSummary":
        return cls(**d)


_COUNT_FIELD = {
    AcademicStatus.APPROVED: "approved_count",
    AcademicStatus.ON_TRACK: "on_track_count",
    AcademicStatus.WARNING: "warning_count",
    AcademicStatus.CRITICAL: "critical_count",
    AcademicStatus.FAILED: "failed_count",
}


def aggregate(
    table: AcademicTable,
    students: Sequence[StudentStatistics],
    config: Optional[EngineConfig] = None,
    policy: Optional[StatusPolicy] = None,
    statistics: Optional[Statistics] = None,
    statuses: Optional[Sequence[AcademicStatus]] = None,
) -> ClassSummary:
    """
    Fold per-student results into the class summary.

    Mean and deviation cover defined accumulated scores only. Every student is
    classified once for the tier counts, unless `statuses` (aligned with
    `students`) already carries the assigned ones. Possible points come from
    the per-evaluation maxima in `statistics` when given.
    """
    config = config or EngineConfig()
    policy = policy or DEFAULT_POLICY

    if statuses is None:
        statuses = [policy.classify(s.accumulated_score, s.lost_points, config) for s in students]
    elif len(statuses) != len(students):
        raise ValueError(f"{len(statuses)} statuses for {len(students)} students")

    acc = Welford()
    counts = {k: 0 for k in _COUNT_FIELD.values()}
    for s, status in zip(students, statuses):
        if s.accumulated_score is not None:
            acc.push(s.accumulated_score)
        counts[_COUNT_FIELD[status]] += 1

    possible = statistics.accumulated_possible_points if statistics is not None else _possible_points(table)

    summary = ClassSummary(
        student_count=table.student_count,
        accumulated_possible_points=possible,
        overall_average=acc.average,
        overall_std_dev=acc.std_dev,
        **counts,
    )
    logger.info("class summary: %d students, average=%s, %s", summary.student_count, summary.overall_average, counts)
    return summary


def _possible_points(table: AcademicTable) -> float:
    total = 0.0
    for j in range(table.evaluation_count):
        m = discovered_maximum(table, j)
        if m is not None:
            total += m
    return total
