"""Error types raised while parsing trajectories and assembling a scene.

All errors derive from ``PoincareError``, itself a ``ValueError``, so callers
that already handle ``ValueError`` (the CLI does) report them uniformly.
"""

from __future__ import annotations


class PoincareError(ValueError):
    """Base class for all poincare_tools errors."""


class TrajectorySyntaxError(PoincareError):
    """Malformed trajectory input.

    Attributes:
        line: 1-based line number where the error was detected.
        source: Name of the input (file name or ``<input>``).
    """

    def __init__(self, message: str, line: int, source: str = '<input>') -> None:
        self.line = line
        self.source = source
        super().__init__(f'{source}:{line}: {message}')


class CapacityError(PoincareError):
    """A trajectory or scene limit (points, ticks, labels, text, arrows) was exceeded."""

    def __init__(self, message: str, line: int | None = None, source: str = '<input>') -> None:
        self.line = line
        self.source = source
        if line is not None:
            message = f'{source}:{line}: {message}'
        super().__init__(message)


class NumericError(PoincareError):
    """A projected coordinate is NaN or infinite."""


class DegenerateGeometryError(PoincareError):
    """Tangent or normal vector has (near) zero length."""
