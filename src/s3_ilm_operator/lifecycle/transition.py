"""Codec between the declarative transition list and the Transition variant."""

from __future__ import annotations

from typing import Sequence

from .expiration import format_date, format_days, parse_date, parse_days
from .models import Transition, TransitionDate, TransitionDays, TransitionInput


def parse_transition(transitions: Sequence[TransitionInput]) -> Transition:
    """Encode a transition list of at most one element.

    Days take precedence over date. When neither parses the result is None,
    the same as an empty list.
    """
    if not transitions:
        return None

    transition = transitions[0]
    days = parse_days(transition.days)
    if days is not None:
        return TransitionDays(days, transition.storage_class)

    parsed = parse_date(transition.date)
    if parsed is not None:
        return TransitionDate(parsed, transition.storage_class)

    return None


def format_transition(transition: Transition) -> list[TransitionInput]:
    """Decode a Transition variant into a zero- or one-element list."""
    if isinstance(transition, TransitionDays):
        return [TransitionInput(days=format_days(transition.days), storage_class=transition.storage_class)]
    if isinstance(transition, TransitionDate):
        return [TransitionInput(date=format_date(transition.date), storage_class=transition.storage_class)]
    return []
