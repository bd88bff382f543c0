"""Structured JSON logging for the S3 ILM Operator.

Every record is written as one JSON document. Fields passed through
``extra=`` become top-level keys, so handlers attach the policy identity
with ``extra=policy_fields(meta, ...)``.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from .constants import CONTROLLER_NAME, KIND_ILM_POLICY
from .utils.errors import redact

# Attributes every LogRecord carries; anything else came in through ``extra``
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON with credentials redacted."""

    def format(self, record: logging.LogRecord) -> str:
        document: dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": redact(record.getMessage()),
        }
        for key, value in vars(record).items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                document[key] = redact(value) if isinstance(value, str) else value
        if record.exc_info:
            document["exception"] = redact(self.formatException(record.exc_info))
        return json.dumps(document, default=str)


def setup_structured_logging(level: int = logging.INFO) -> None:
    """Send all records to stdout as JSON."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)


def policy_fields(meta: dict[str, Any], reason: str, **fields: Any) -> dict[str, Any]:
    """Build the ``extra`` mapping identifying an ILMPolicy in a log record.

    Args:
        meta: ILMPolicy metadata
        reason: Machine-readable reason, usually an event reason
        **fields: Additional fields such as ``bucket`` or ``rule_count``
    """
    return {
        "controller": CONTROLLER_NAME,
        "kind": KIND_ILM_POLICY,
        "policy": meta.get("name", "unknown"),
        "namespace": meta.get("namespace", "default"),
        "uid": meta.get("uid", "unknown"),
        "reason": reason,
        **fields,
    }
