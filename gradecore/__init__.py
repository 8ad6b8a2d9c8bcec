"""
This package contains:
- grid assembly from already tokenized CSV/XLSX cells (header row detection)
- grade cell interpretation (numbers, fractions, NP/RM codes, labels)
- gradebook normalization (identity block, evaluation columns, final grade)
- per-student / per-evaluation statistics
- academic status projection and class summary
- report export
"""
from .config import EngineConfig, load_config, save_config
from .errors import GradebookError, InputError, EmptyInput, NormalizationError, MissingIdentityField
from .grid import RawGrid, detect_header_row, grid_from_matrix, grid_from_dataframe
from .cells import Numeric, Fraction, Withdrawn, Absent, Label, GradeValue, interpret, raw_value
from .table import StudentRecord, AcademicTable, normalize
from .stats import Statistics, StudentStatistics, EvaluationStatistics, compute_statistics
from .rules import AcademicStatus, StatusPolicy, ProjectedPressurePolicy, ThresholdPolicy, classify
from .aggregate import ClassSummary, Welford, aggregate
from .engine import GradeEngine, GradebookSummary, StudentSummary, analyze, summarize
from .export import export_to_excel_bytes, summary_frames, grades_frame

__all__ = [
    "EngineConfig",
    "load_config",
    "save_config",
    "GradebookError",
    "InputError",
    "EmptyInput",
    "NormalizationError",
    "MissingIdentityField",
    "RawGrid",
    "detect_header_row",
    "grid_from_matrix",
    "grid_from_dataframe",
    "Numeric",
    "Fraction",
    "Withdrawn",
    "Absent",
    "Label",
    "GradeValue",
    "interpret",
    "raw_value",
    "StudentRecord",
    "AcademicTable",
    "normalize",
    "Statistics",
    "StudentStatistics",
    "EvaluationStatistics",
    "compute_statistics",
    "AcademicStatus",
    "StatusPolicy",
    "ProjectedPressurePolicy",
    "ThresholdPolicy",
    "classify",
    "ClassSummary",
    "Welford",
    "aggregate",
    "GradeEngine",
    "GradebookSummary",
    "StudentSummary",
    "analyze",
    "summarize",
    "export_to_excel_bytes",
    "summary_frames",
    "grades_frame",
]
