"""
Analysis Errors

Exceptions raised by the analysis stages. Every error can carry the pipeline
stage and the column or component that triggered it, so the caller can
report exactly where the run stopped.
"""

from typing import Optional, List


class AnalysisError(Exception):
    """Base class for all pipeline errors."""

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        column: Optional[str] = None,
        component: Optional[int] = None
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.column = column
        self.component = component

    def location(self) -> str:
        """Human-readable description of where the error happened."""
        parts = []
        if self.stage:
            parts.append(f"stage '{self.stage}'")
        if self.column:
            parts.append(f"column '{self.column}'")
        if self.component is not None:
            parts.append(f"component {self.component}")
        return ", ".join(parts) if parts else "unknown location"

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class SchemaError(AnalysisError):
    """Expected column missing or malformed."""


class DegenerateColumnError(AnalysisError):
    """Entropy weight undefined because a column's mean is zero."""

    def __init__(
        self,
        message: str,
        column: str,
        columns: Optional[List[str]] = None,
        stage: Optional[str] = None
    ):
        super().__init__(message, stage=stage, column=column)
        self.columns = list(columns) if columns else [column]


class NumericError(AnalysisError):
    """Non-finite values entering a numerical routine."""


class InsufficientDataError(AnalysisError):
    """Too few observations/components for the requested model size."""
