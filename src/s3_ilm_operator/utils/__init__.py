"""Utility functions for the S3 ILM Operator."""

from .cache import TTLCache, provider_cache
from .conditions import clear_condition, find_condition, set_condition
from .errors import describe_error, redact
from .events import record
from .rate_limit import Throttle, k8s_throttle, rate_limit_backoff, s3_throttle
from .secrets import MissingSecretError, read_secret_value

__all__ = [
    "MissingSecretError",
    "TTLCache",
    "Throttle",
    "clear_condition",
    "describe_error",
    "find_condition",
    "k8s_throttle",
    "provider_cache",
    "rate_limit_backoff",
    "read_secret_value",
    "record",
    "redact",
    "s3_throttle",
    "set_condition",
]
