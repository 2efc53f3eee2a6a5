"""
Error taxonomy for the catchment attribute pipeline.

Every error names the stage that failed and the offending file, table or
column so the orchestrator can report it without a traceback.
"""
from typing import Optional


class PipelineError(Exception):
    """Base class for unrecoverable pipeline failures."""

    stage = "pipeline"

    def __init__(self, message: str, name: Optional[str] = None):
        self.name = name
        self.detail = message
        if name is not None:
            message = f"[{self.stage}] {name}: {message}"
        else:
            message = f"[{self.stage}] {message}"
        super().__init__(message)


class ParseError(PipelineError):
    """Input file missing, empty or malformed."""

    stage = "load"


class JoinError(PipelineError):
    """Join key or response missing, or no overlapping keys."""

    stage = "join"


class TransformError(PipelineError):
    """Non-numeric value where a numeric column was expected."""

    stage = "transform"


class EmptyResultError(PipelineError):
    """No rows left after filtering."""

    stage = "filter"
