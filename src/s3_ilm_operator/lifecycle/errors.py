"""Errors raised by lifecycle validation and the reconciliation state machine."""

from __future__ import annotations


class ILMValidationError(ValueError):
    """Declarative input rejected before any store call."""


class ILMFormatError(ILMValidationError):
    """A field value matches none of its accepted shapes."""


class ILMRangeError(ILMValidationError):
    """A numeric field is outside its accepted range."""


class ResourceError(Exception):
    """A store operation failed for a bucket.

    Attributes:
        message: Human-readable summary of the failed operation
        bucket: Bucket the operation targeted
        cause: Underlying exception, if any
    """

    def __init__(self, message: str, bucket: str, cause: Exception | None = None) -> None:
        self.message = message
        self.bucket = bucket
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"{self.message} for bucket {self.bucket}"
        if self.cause is not None:
            text = f"{text}: {self.cause}"
        return text


class LifecycleReadError(ResourceError):
    """Reading the lifecycle configuration failed while strict reads are enabled."""
