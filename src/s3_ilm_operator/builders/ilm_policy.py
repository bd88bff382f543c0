"""Builder for ILM policy configurations.

The CRD spec is untyped; it is validated and converted into ``RuleInput``
values once here so the lifecycle core never inspects raw dictionaries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..constants import MAX_BUCKET_NAME_LENGTH
from ..lifecycle.errors import ILMRangeError, ILMValidationError
from ..lifecycle.expiration import validate_expiration
from ..lifecycle.models import RuleInput, TransitionInput
from ..lifecycle.transition import parse_transition

logger = logging.getLogger(__name__)


@dataclass
class ILMPolicyConfig:
    """Validated ILM policy configuration."""

    bucket: str
    rules: list[RuleInput] = field(default_factory=list)
    provider_name: str = ""
    provider_namespace: str | None = None
    strict_read: bool = False


def create_ilm_policy_config_from_spec(spec: dict[str, Any]) -> ILMPolicyConfig:
    """Create an ILM policy configuration from CRD spec.

    Args:
        spec: ILMPolicy CRD spec

    Returns:
        Validated configuration

    Raises:
        ILMValidationError: If any field is missing or malformed
    """
    bucket = spec.get("bucket")
    if not bucket or not isinstance(bucket, str):
        raise ILMValidationError("bucket is required")
    if len(bucket) > MAX_BUCKET_NAME_LENGTH:
        raise ILMValidationError(f"bucket must be at most {MAX_BUCKET_NAME_LENGTH} characters")

    raw_rules = spec.get("rules")
    if not isinstance(raw_rules, list):
        raise ILMValidationError("rules must be a list")

    rules = [_create_rule_input(raw_rule, idx) for idx, raw_rule in enumerate(raw_rules)]

    seen: set[str] = set()
    for rule in rules:
        if rule.id in seen:
            raise ILMValidationError(f"duplicate rule id {rule.id!r}")
        seen.add(rule.id)

    provider_ref = spec.get("providerRef") or {}
    if not provider_ref.get("name"):
        raise ILMValidationError("providerRef.name is required")

    return ILMPolicyConfig(
        bucket=bucket,
        rules=rules,
        provider_name=provider_ref["name"],
        provider_namespace=provider_ref.get("namespace"),
        strict_read=bool(spec.get("strictRead", False)),
    )


def _create_rule_input(raw_rule: Any, idx: int) -> RuleInput:
    if not isinstance(raw_rule, dict):
        raise ILMValidationError(f"rules[{idx}] must be an object")

    rule_id = raw_rule.get("id")
    if not rule_id or not isinstance(rule_id, str):
        raise ILMValidationError(f"rules[{idx}].id is required")

    expiration = raw_rule.get("expiration") or ""
    if expiration:
        validate_expiration(str(expiration))

    tags = raw_rule.get("tags") or {}
    if not isinstance(tags, dict):
        raise ILMValidationError(f"rules[{idx}].tags must be a map")

    return RuleInput(
        id=rule_id,
        expiration=str(expiration),
        transition=_create_transition_inputs(raw_rule.get("transition"), rule_id),
        noncurrent_version_expiration_days=_noncurrent_days(raw_rule, "noncurrent_version_expiration_days"),
        noncurrent_version_transition_days=_noncurrent_days(raw_rule, "noncurrent_version_transition_days"),
        filter=str(raw_rule.get("filter") or ""),
        tags={str(k): str(v) for k, v in tags.items()},
    )


def _create_transition_inputs(raw_transitions: Any, rule_id: str) -> list[TransitionInput]:
    if not raw_transitions:
        return []
    if not isinstance(raw_transitions, list):
        raise ILMValidationError(f"rule {rule_id}: transition must be a list")
    if len(raw_transitions) > 1:
        raise ILMValidationError(f"rule {rule_id}: at most one transition is allowed")

    raw_transition = raw_transitions[0]
    if not isinstance(raw_transition, dict):
        raise ILMValidationError(f"rule {rule_id}: transition must be an object")
    if not raw_transition.get("storage_class"):
        raise ILMValidationError(f"rule {rule_id}: transition storage_class is required")

    transitions = [TransitionInput.from_dict(raw_transition)]
    if parse_transition(transitions) is None:
        # Accepted as "no transition" for compatibility with existing policies
        logger.warning(
            f"rule {rule_id}: transition has neither a valid duration (30d) nor a date (1970-01-01), ignoring it"
        )
    return transitions


def _noncurrent_days(raw_rule: dict[str, Any], key: str) -> int:
    value = raw_rule.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ILMValidationError(f"{key} must be an integer")
    if value < 1:
        raise ILMRangeError(f"{key} must be strictly positive")
    return value
