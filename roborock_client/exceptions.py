"""Exception hierarchy for roborock_client."""

from __future__ import annotations


class RoborockError(Exception):
    """Base exception for all roborock_client errors."""


class RoborockInvalidArgumentError(RoborockError, ValueError):
    """Caller-supplied data has the wrong shape or range."""


class RoborockCapacityExceededError(RoborockError):
    """Persistent markers exceed the robot's weighted marker budget."""

    def __init__(self, message: str, *, weight: int, limit: int) -> None:
        self.weight = weight
        self.limit = limit
        super().__init__(message)


class RoborockNotSupportedError(RoborockError, NotImplementedError):
    """Operation is not available on the connected firmware generation."""


class RoborockTransportError(RoborockError):
    """Failure reported by the command channel."""


class RoborockConnectionError(RoborockTransportError):
    """Raised when connection to the vacuum fails."""


class RoborockCommandError(RoborockTransportError):
    """Raised when a command fails or times out."""

    def __init__(
        self,
        message: str,
        *,
        method: str = "",
        code: int | None = None,
    ) -> None:
        self.method = method
        self.code = code
        super().__init__(message)
