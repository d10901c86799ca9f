class PealError(Exception):
    """Base error for the Peal engine."""


class InvalidParameterError(PealError, ValueError):
    """Raised when a parameter set cannot be rendered (NaN, non-positive duration, ...)."""

    def __init__(self, field: str, value, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"{field}={value!r}: {reason}")
