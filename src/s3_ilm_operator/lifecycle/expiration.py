"""Codec between the expiration string and the Expiration variant.

Accepted strings are a duration (``5d``), an ISO calendar date
(``1970-01-01``) or the literal ``DeleteMarker``.
"""

from __future__ import annotations

import re
from datetime import date

from ..constants import EXPIRATION_DELETE_MARKER
from .errors import ILMFormatError
from .models import Expiration, ExpirationDate, ExpirationDays, ExpirationDeleteMarker

EXPIRATION_FORMAT_MESSAGE = 'expiration must be a duration (5d), date (1970-01-01), or "DeleteMarker"'

_DAYS_PATTERN = re.compile(r"(\d+)d")
_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_days(value: str) -> int | None:
    """Parse a ``<n>d`` duration token, returning None when it does not match."""
    match = _DAYS_PATTERN.fullmatch(value or "")
    if match is None:
        return None
    return int(match.group(1))


def parse_date(value: str) -> date | None:
    """Parse a ``YYYY-MM-DD`` date, returning None when it is not a valid date."""
    if not _DATE_PATTERN.fullmatch(value or ""):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def format_days(days: int) -> str:
    return f"{days}d"


def format_date(value: date) -> str:
    return value.isoformat()


def parse_expiration(value: str) -> Expiration:
    """Encode an expiration string.

    Returns:
        The matching variant, or None when the string matches no accepted shape
    """
    if value == EXPIRATION_DELETE_MARKER:
        return ExpirationDeleteMarker()

    days = parse_days(value)
    if days is not None:
        return ExpirationDays(days)

    parsed = parse_date(value)
    if parsed is not None:
        return ExpirationDate(parsed)

    return None


def format_expiration(expiration: Expiration) -> str:
    """Decode an Expiration variant back into its string form."""
    if isinstance(expiration, ExpirationDeleteMarker):
        return EXPIRATION_DELETE_MARKER
    if isinstance(expiration, ExpirationDays):
        return format_days(expiration.days)
    if isinstance(expiration, ExpirationDate):
        return format_date(expiration.date)
    return ""


def validate_expiration(value: str) -> Expiration:
    """Parse an expiration string, rejecting unparseable values.

    ``0d`` parses but is rejected here since stores refuse a zero day count.

    Raises:
        ILMFormatError: If the value matches none of the accepted shapes
    """
    expiration = parse_expiration(value)
    if expiration is None or expiration == ExpirationDays(0):
        raise ILMFormatError(EXPIRATION_FORMAT_MESSAGE)
    return expiration
