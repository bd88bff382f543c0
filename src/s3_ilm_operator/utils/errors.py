"""Redaction of credentials from text that leaves the operator.

Error messages end up in logs, Kubernetes events and status conditions.
botocore and the Kubernetes client may echo request details into them,
so every such message goes through ``redact`` first.
"""

from __future__ import annotations

import re

REDACTED = "[REDACTED]"

# Each pattern keeps the label in group 1 and replaces only what follows it
_LABELLED_VALUES = re.compile(
    r"(\b(?:aws_)?(?:access[_\s]?key[_\s]?id|secret[_\s]?(?:access[_\s]?)?key|session[_\s]?token|password|token)"
    r"\s*[:=]\s*)[^\s,;)&]+",
    re.IGNORECASE,
)
_PRESIGNED_PARAMS = re.compile(r"(X-Amz-(?:Credential|Signature|Security-Token)=)[^&\s]+")
_ACCESS_KEY_IDS = re.compile(r"\b(?:AKIA|ASIA)[A-Z0-9]{16}\b")


def redact(text: str) -> str:
    """Replace credential values in ``text`` with a placeholder."""
    text = _LABELLED_VALUES.sub(rf"\1{REDACTED}", text)
    text = _PRESIGNED_PARAMS.sub(rf"\1{REDACTED}", text)
    return _ACCESS_KEY_IDS.sub(REDACTED, text)


def describe_error(error: BaseException) -> str:
    """One-line redacted description of an exception for events and conditions."""
    message = " ".join(str(error).split())
    return redact(message or type(error).__name__)
