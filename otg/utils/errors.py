"""
Custom exception types for the OTG generators.
Argument errors also derive from ValueError so callers may catch either.
"""


class OTGError(Exception):
    """Base class for trajectory generator failures."""

    prefix = "OTG ERROR"

    def __init__(self, message: str):
        self.original_message = message
        super().__init__(f"{self.prefix}: {message}")

    def __str__(self):
        return f"{self.prefix}: {self.original_message}"


class DimensionMismatchError(OTGError, ValueError):
    """A vector argument does not match the generator dimension."""

    prefix = "Dimension Mismatch"

    def __init__(self, message: str, expected: int | None = None, actual: int | None = None):
        self.expected = expected
        self.actual = actual
        super().__init__(message)


class InvalidLimitError(OTGError, ValueError):
    """A velocity/acceleration/jerk limit has a non-positive component."""

    prefix = "Invalid Limit"


class InvalidOrientationError(OTGError, ValueError):
    """An orientation argument is not a proper rotation matrix."""

    prefix = "Invalid Orientation"


class InvalidCycleDurationError(OTGError, ValueError):
    """The control cycle duration is not a positive finite number."""

    prefix = "Invalid Cycle Duration"


class SolverError(OTGError, RuntimeError):
    """The trajectory solver failed; the generator must be reconstructed."""

    prefix = "Solver Error"

    def __init__(self, message: str, result: str | None = None):
        self.result = result
        super().__init__(message)
