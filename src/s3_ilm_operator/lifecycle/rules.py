"""Assemble structured lifecycle rules from declarative inputs and back."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from ..constants import RULE_STATUS_ENABLED
from .expiration import format_expiration, parse_expiration
from .filters import build_filter, split_filter
from .models import Rule, RuleInput
from .transition import format_transition, parse_transition

logger = logging.getLogger(__name__)


def build_rule(rule_input: RuleInput) -> Rule:
    """Build a store rule from a declarative rule.

    Status is always "Enabled"; the store is never asked to create a
    disabled rule. Noncurrent version day counts of 0 mean unset.
    """
    return Rule(
        id=rule_input.id,
        expiration=parse_expiration(rule_input.expiration),
        transition=parse_transition(rule_input.transition),
        noncurrent_version_expiration_days=rule_input.noncurrent_version_expiration_days or None,
        noncurrent_version_transition_days=rule_input.noncurrent_version_transition_days or None,
        status=RULE_STATUS_ENABLED,
        filter=build_filter(rule_input.filter, rule_input.tags),
    )


def decode_rule(rule: Rule) -> RuleInput:
    """Decode a store rule, keeping the status the store reported."""
    prefix, tags = split_filter(rule.filter)
    return RuleInput(
        id=rule.id,
        expiration=format_expiration(rule.expiration),
        transition=format_transition(rule.transition),
        noncurrent_version_expiration_days=rule.noncurrent_version_expiration_days or 0,
        noncurrent_version_transition_days=rule.noncurrent_version_transition_days or 0,
        status=rule.status,
        filter=prefix,
        tags=tags,
    )


def build_rules(bucket: str, rule_inputs: Iterable[RuleInput]) -> list[Rule]:
    """Build the full, ordered rule list submitted for a bucket."""
    rules = [build_rule(rule_input) for rule_input in rule_inputs]
    logger.debug(f"Built {len(rules)} lifecycle rules for bucket {bucket}")
    return rules


def decode_rules(rules: Iterable[Rule]) -> list[RuleInput]:
    return [decode_rule(rule) for rule in rules]


def order_rules(rules_by_id: Mapping[str, RuleInput], order: Sequence[str]) -> list[RuleInput]:
    """Rebuild an ordered rule list from rules keyed by id.

    Ids listed in ``order`` come first, in that order; remaining rules keep
    their mapping order.
    """
    ordered = [rules_by_id[rule_id] for rule_id in order if rule_id in rules_by_id]
    seen = set(order)
    ordered.extend(rule for rule_id, rule in rules_by_id.items() if rule_id not in seen)
    return ordered


def rules_differ(current: Sequence[RuleInput], desired: Sequence[RuleInput]) -> bool:
    """Check whether two rule lists would produce different store configurations.

    Comparison happens on the built rules, so status and equivalent spellings
    (e.g. an AND filter without tags) do not count as changes.
    """
    return [build_rule(r) for r in current] != [build_rule(r) for r in desired]
