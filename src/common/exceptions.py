"""
Exception taxonomy for the document scan pipeline.

Each stage raises its own named failure so callers can decide whether to
drop a candidate, fall back, or propagate. Detection finding nothing is not
an error and has no exception here.
"""


class ScanPipelineError(Exception):
    """Base class for all pipeline failures."""


class UnsupportedInputError(ScanPipelineError, ValueError):
    """Input cannot be interpreted as a raster surface."""


class RectificationError(ScanPipelineError, ValueError):
    """Corners are degenerate and no usable perspective transform exists."""


class UnknownFilterError(ScanPipelineError, KeyError):
    """Requested enhancement preset does not exist."""

    def __str__(self) -> str:
        # KeyError repr-quotes its message by default
        return str(self.args[0]) if self.args else ""


class EngineUnavailableError(ScanPipelineError, RuntimeError):
    """No boundary detection backend was injected or it failed to start."""


class AdvisorError(ScanPipelineError, RuntimeError):
    """Filter advisor transport or reply parsing failed."""
