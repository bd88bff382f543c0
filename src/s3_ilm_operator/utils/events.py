"""Kubernetes events recorded on ILMPolicy resources."""

from __future__ import annotations

from typing import Any

import kopf

from .errors import redact


def record(meta: dict[str, Any], reason: str, message: str, warning: bool = False) -> None:
    """Post an event on the resource described by ``meta``.

    Args:
        meta: Resource metadata
        reason: Event reason, one of the ``EVENT_REASON_*`` constants
        message: Event message, redacted before posting
        warning: Post a Warning instead of a Normal event
    """
    kopf.event(meta, type="Warning" if warning else "Normal", reason=reason, message=redact(message))
