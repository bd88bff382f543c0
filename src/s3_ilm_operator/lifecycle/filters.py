"""Codec between (prefix, tags) and the rule Filter variant."""

from __future__ import annotations

from typing import Mapping

from .models import AndFilter, Filter, PrefixFilter, Tag


def build_filter(prefix: str, tags: Mapping[str, str] | None = None) -> Filter:
    """Build a filter, using the AND form whenever any tag is present."""
    if tags:
        return AndFilter(prefix=prefix, tags=frozenset(Tag(k, v) for k, v in tags.items()))
    return PrefixFilter(prefix=prefix)


def split_filter(rule_filter: Filter) -> tuple[str, dict[str, str]]:
    """Return the prefix and tag mapping carried by a filter.

    An AND filter without tags is equivalent to a prefix filter.
    """
    if isinstance(rule_filter, AndFilter):
        return rule_filter.prefix, {tag.key: tag.value for tag in rule_filter.tags}
    return rule_filter.prefix, {}
