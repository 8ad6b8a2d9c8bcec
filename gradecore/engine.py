from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Sequence, Tuple

import pandas as pd

from .aggregate import ClassSummary, aggregate
from .config import EngineConfig
from .grid import RawGrid, grid_from_dataframe, grid_from_matrix
from .rules import AcademicStatus, StatusPolicy, DEFAULT_POLICY
from .stats import EvaluationStatistics, Statistics, compute_statistics
from .table import AcademicTable, normalize

@dataclass(frozen=True)
class StudentSummary:
    id: str
    name: str
    group: str
    accumulated_score: Optional[float]
    percentile: Optional[float]
    std_dev: Optional[float]
    lost_points: Optional[float]
    status: AcademicStatus

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "group": self.group,
            "accumulated_score": self.accumulated_score,
            "percentile": self.percentile,
            "std_dev": self.std_dev,
            "lost_points": self.lost_points,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StudentSummary":
        return cls(
            id=str(d["id"]),
            name=str(d.get("name", "")),
            group=str(d.get("group", "")),
            accumulated_score=d.get("accumulated_score"),
            percentile=d.get("percentile"),
            std_dev=d.get("std_dev"),
            lost_points=d.get("lost_points"),
            status=AcademicStatus(d["status"]),
        )


@dataclass(frozen=True)
class GradebookSummary:
    """Everything a dashboard or report needs, in one serializable value."""
    students: Tuple[StudentSummary, ...]
    evaluations: Tuple[EvaluationStatistics, ...]
    class_summary: ClassSummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "students": [s.to_dict() for s in self.students],
            "evaluations": [asdict(e) for e in self.evaluations],
            "class": self.class_summary.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GradebookSummary":
        return cls(
            students=tuple(StudentSummary.from_dict(s) for s in d.get("students", [])),
            evaluations=tuple(EvaluationStatistics(**e) for e in d.get("evaluations", [])),
            class_summary=ClassSummary.from_dict(d["class"]),
        )


def summarize(
    table: AcademicTable,
    config: Optional[EngineConfig] = None,
    policy: Optional[StatusPolicy] = None,
    statistics: Optional[Statistics] = None,
) -> GradebookSummary:
    config = config or EngineConfig()
    policy = policy or DEFAULT_POLICY
    stats = statistics if statistics is not None else compute_statistics(table)

    students = tuple(
        StudentSummary(
            id=s.identifier,
            name=s.display_name,
            group=s.group,
            accumulated_score=s.accumulated_score,
            percentile=s.percentile,
            std_dev=s.std_dev,
            lost_points=s.lost_points,
            status=policy.classify(s.accumulated_score, s.lost_points, config),
        )
        for s in stats.students
    )
    class_summary = aggregate(
        table, stats.students, config, policy,
        statistics=stats, statuses=[s.status for s in students],
    )
    return GradebookSummary(students=students, evaluations=stats.evaluations, class_summary=class_summary)


@dataclass(frozen=True)
class GradeEngine:
    """
    Normalized table plus its statistics, computed once per ingestion.

    Nothing here is updated in place; a new file means a new engine.
    """
    table: AcademicTable
    statistics: Statistics
    summary: GradebookSummary
    config: EngineConfig

    @classmethod
    def from_grid(
        cls,
        grid: RawGrid,
        config: Optional[EngineConfig] = None,
        policy: Optional[StatusPolicy] = None,
    ) -> "GradeEngine":
        config = config or EngineConfig()
        table = normalize(grid, config)
        stats = compute_statistics(table)
        summary = summarize(table, config, policy, statistics=stats)
        return cls(table=table, statistics=stats, summary=summary, config=config)

    @classmethod
    def from_matrix(
        cls,
        matrix: Sequence[Sequence[Any]],
        config: Optional[EngineConfig] = None,
        policy: Optional[StatusPolicy] = None,
    ) -> "GradeEngine":
        return cls.from_grid(grid_from_matrix(matrix, config), config, policy)

    @classmethod
    def from_dataframe(
        cls,
        df_raw: pd.DataFrame,
        config: Optional[EngineConfig] = None,
        policy: Optional[StatusPolicy] = None,
    ) -> "GradeEngine":
        return cls.from_grid(grid_from_dataframe(df_raw, config), config, policy)

    def get_summary(self) -> Dict[str, Any]:
        return self.summary.to_dict()

    def get_table(self) -> Dict[str, Any]:
        return self.table.to_dict()


def analyze(
    grid: RawGrid,
    config: Optional[EngineConfig] = None,
    policy: Optional[StatusPolicy] = None,
) -> GradeEngine:
    return GradeEngine.from_grid(grid, config, policy)
