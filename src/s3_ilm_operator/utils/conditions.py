"""Status conditions of ILMPolicy resources."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

Conditions = list[dict[str, Any]]


def set_condition(conditions: Conditions, cond_type: str, active: bool, reason: str, message: str) -> Conditions:
    """Return ``conditions`` with ``cond_type`` set.

    ``lastTransitionTime`` only moves when the status flips.
    """
    status = "True" if active else "False"
    previous = find_condition(conditions, cond_type)
    if previous is not None and previous.get("status") == status:
        since = previous.get("lastTransitionTime")
    else:
        since = datetime.now(timezone.utc).isoformat()

    updated = clear_condition(conditions, cond_type)
    updated.append({
        "type": cond_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": since,
    })
    return updated


def clear_condition(conditions: Conditions, cond_type: str) -> Conditions:
    return [dict(cond) for cond in conditions if cond.get("type") != cond_type]


def find_condition(conditions: Conditions, cond_type: str) -> dict[str, Any] | None:
    return next((cond for cond in conditions if cond.get("type") == cond_type), None)
