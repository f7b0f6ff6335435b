"""
Exception types shared across the pipeline.

Only `RequestCancelled` is meant to cross component boundaries; every other
upstream failure is caught where it happens and turned into a fallback value.
"""


class VerixaError(Exception):
    """Base class for all pipeline errors."""


class RequestCancelled(VerixaError):
    """The caller aborted the request; remaining stages must not run."""


class InvalidQueryError(VerixaError, ValueError):
    """The query is missing or blank."""


class VectorLengthMismatch(VerixaError, ValueError):
    """Two vectors of different dimensionality were compared."""

    def __init__(self, left: int, right: int):
        super().__init__(f"Vectors must have the same length ({left} != {right})")
        self.left = left
        self.right = right


class ProviderError(VerixaError):
    """An upstream service answered with something unusable."""

    def __init__(self, provider: str, message: str, status: int = None):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status = status
