"""Exception hierarchy for the resize engine."""

from typing import override


class ResizeEngineError(Exception):
    """Base class for all resize engine errors."""

    def __init__(self, message: str = "An unknown resize error occurred."):
        self.message: str = message
        super().__init__(self.message)

    @override
    def __str__(self):
        return f"{type(self).__name__}: {self.message}"


class LayoutError(ResizeEngineError):
    """Raised when a request produces invalid or non-finite geometry."""


class InvalidBackgroundError(ResizeEngineError):
    """Raised when the background colour cannot be parsed."""


class SurfaceAllocationError(ResizeEngineError):
    """Raised when Pillow refuses to create a surface of the requested size."""

    def __init__(self, width: int, height: int, reason: str = ""):
        self.width: int = width
        self.height: int = height
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Cannot allocate {width}x{height} surface{detail}")


class StrategyExecutionError(ResizeEngineError):
    """Raised when a strategy's internal operation fails."""

    def __init__(self, strategy: str, message: str):
        self.strategy: str = strategy
        super().__init__(f"[{strategy}] {message}")


class JobTimeoutError(ResizeEngineError, TimeoutError):
    """Raised when a batch job exceeds its time budget."""

    def __init__(self, index: int, timeout_ms: float):
        self.index: int = index
        self.timeout_ms: float = timeout_ms
        super().__init__(f"Job {index} timed out after {timeout_ms:g}ms")


class PoolExhaustionWarning(UserWarning):
    """Non-fatal: the surface pool could not retain a released surface."""
