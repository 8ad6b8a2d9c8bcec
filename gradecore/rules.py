from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from .config import EngineConfig


class AcademicStatus(str, Enum):
    APPROVED = "Approved"
    ON_TRACK = "OnTrack"
    WARNING = "Warning"
    CRITICAL = "Critical"
    FAILED = "Failed"


# report labels, as shown to instructors
STATUS_LABELS = {
    AcademicStatus.APPROVED: "Aprobado",
    AcademicStatus.ON_TRACK: "Bueno",
    AcademicStatus.WARNING: "Advertencia",
    AcademicStatus.CRITICAL: "Crítico",
    AcademicStatus.FAILED: "Reprobado",
}


class StatusPolicy(Protocol):
    def classify(self, accumulated: Optional[float], lost: Optional[float], config: EngineConfig) -> AcademicStatus:
        ...


@dataclass(frozen=True)
class ProjectedPressurePolicy:
    """
    Projects pass/fail risk from what the student can still earn.

      ceiling   = total_points - lost
      needed    = passing_score - accumulated
      in_play   = ceiling - accumulated
      pressure  = needed / in_play

    Undefined accumulated/lost are read as 0.
    """

    def classify(self, accumulated: Optional[float], lost: Optional[float], config: EngineConfig) -> AcademicStatus:
        acc = accumulated if accumulated is not None else 0.0
        lst = lost if lost is not None else 0.0

        if acc >= config.passing_score:
            return AcademicStatus.APPROVED

        ceiling = config.total_points - lst
        if ceiling < config.passing_score:
            return AcademicStatus.FAILED

        needed = config.passing_score - acc
        in_play = ceiling - acc
        if in_play <= 0:
            return AcademicStatus.FAILED

        pressure = needed / in_play
        if pressure <= config.on_track_ratio:
            return AcademicStatus.ON_TRACK
        if pressure <= config.warning_ratio:
            return AcademicStatus.WARNING
        return AcademicStatus.CRITICAL


@dataclass(frozen=True)
class ThresholdPolicy:
    # earlier rule set: fixed cut points on the accumulated score, lost points ignored
    approved_at: float = 60.0
    warning_at: float = 40.0

    def classify(self, accumulated: Optional[float], lost: Optional[float], config: EngineConfig) -> AcademicStatus:
        if accumulated is None:
            return AcademicStatus.FAILED
        if accumulated >= self.approved_at:
            return AcademicStatus.APPROVED
        if accumulated >= self.warning_at:
            return AcademicStatus.WARNING
        return AcademicStatus.FAILED


DEFAULT_POLICY = ProjectedPressurePolicy()


def classify(
    accumulated: Optional[float],
    lost: Optional[float],
    config: Optional[EngineConfig] = None,
    policy: Optional[StatusPolicy] = None,
) -> AcademicStatus:
    return (policy or DEFAULT_POLICY).classify(accumulated, lost, config or EngineConfig())
