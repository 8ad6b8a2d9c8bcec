from __future__ import annotations
from typing import Optional


class GradebookError(Exception):
    """Base class for every failure raised by gradecore."""


class InputError(GradebookError):
    # the input is empty or structurally unusable; no partial result exists
    pass


class EmptyInput(InputError):
    def __init__(self, message: str = "grid contains no data rows"):
        super().__init__(message)


class NormalizationError(GradebookError):
    def __init__(self, message: str, row_index: Optional[int] = None):
        super().__init__(message)
        self.row_index = row_index


class MissingIdentityField(NormalizationError):
    """
    A row lacks a required identity cell (the student key, by default).

    row_index is the 0-based position of the row inside grid.rows.
    """

    def __init__(self, row_index: int, field: str, column: str = ""):
        where = f" (column '{column}')" if column else ""
        super().__init__(f"row {row_index}: missing required field '{field}'{where}", row_index=row_index)
        self.field = field
        self.column = column
