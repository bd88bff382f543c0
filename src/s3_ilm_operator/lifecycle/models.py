"""Models for lifecycle rules.

Expiration, transition and filter are tagged unions: each concrete shape is
its own frozen dataclass, so a value can only ever carry the fields of the
shape it is. The empty variant of Expiration and Transition is ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional, Union


@dataclass(frozen=True)
class ExpirationDays:
    """Expire objects a number of days after creation."""

    days: int


@dataclass(frozen=True)
class ExpirationDate:
    """Expire objects on a calendar date."""

    date: date


@dataclass(frozen=True)
class ExpirationDeleteMarker:
    """Remove expired object delete markers."""


Expiration = Optional[Union[ExpirationDays, ExpirationDate, ExpirationDeleteMarker]]


@dataclass(frozen=True)
class TransitionDays:
    """Move objects to a storage class a number of days after creation."""

    days: int
    storage_class: str


@dataclass(frozen=True)
class TransitionDate:
    """Move objects to a storage class on a calendar date."""

    date: date
    storage_class: str


Transition = Optional[Union[TransitionDays, TransitionDate]]


@dataclass(frozen=True)
class Tag:
    """Object tag key/value pair."""

    key: str
    value: str


@dataclass(frozen=True)
class PrefixFilter:
    """Filter matching a single key prefix."""

    prefix: str = ""


@dataclass(frozen=True)
class AndFilter:
    """Filter matching a key prefix and every tag in the set."""

    prefix: str = ""
    tags: frozenset[Tag] = frozenset()


Filter = Union[PrefixFilter, AndFilter]


@dataclass(frozen=True)
class Rule:
    """Structured lifecycle rule as consumed by the store."""

    id: str
    expiration: Expiration = None
    transition: Transition = None
    noncurrent_version_expiration_days: int | None = None
    noncurrent_version_transition_days: int | None = None
    status: str = ""
    filter: Filter = field(default_factory=PrefixFilter)


@dataclass
class TransitionInput:
    """Declarative transition descriptor (days or date, plus storage class)."""

    days: str = ""
    date: str = ""
    storage_class: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TransitionInput:
        return cls(
            days=str(data.get("days") or ""),
            date=str(data.get("date") or ""),
            storage_class=str(data.get("storage_class") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        result = {}
        if self.days:
            result["days"] = self.days
        if self.date:
            result["date"] = self.date
        result["storage_class"] = self.storage_class
        return result


@dataclass
class RuleInput:
    """Declarative, string-typed lifecycle rule.

    Noncurrent version day counts use 0 for "unset". ``status`` is only
    populated when the rule was decoded from the store.
    """

    id: str
    expiration: str = ""
    transition: list[TransitionInput] = field(default_factory=list)
    noncurrent_version_expiration_days: int = 0
    noncurrent_version_transition_days: int = 0
    status: str = ""
    filter: str = ""
    tags: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RuleInput:
        """Create a rule input from its wire/status representation."""
        return cls(
            id=str(data.get("id") or ""),
            expiration=str(data.get("expiration") or ""),
            transition=[TransitionInput.from_dict(t) for t in data.get("transition") or []],
            noncurrent_version_expiration_days=int(data.get("noncurrent_version_expiration_days") or 0),
            noncurrent_version_transition_days=int(data.get("noncurrent_version_transition_days") or 0),
            status=str(data.get("status") or ""),
            filter=str(data.get("filter") or ""),
            tags={str(k): str(v) for k, v in (data.get("tags") or {}).items()},
        )

    def to_dict(self) -> dict[str, Any]:
        """Render the rule in its wire/status representation."""
        return {
            "id": self.id,
            "expiration": self.expiration,
            "transition": [t.to_dict() for t in self.transition],
            "noncurrent_version_expiration_days": self.noncurrent_version_expiration_days,
            "noncurrent_version_transition_days": self.noncurrent_version_transition_days,
            "status": self.status,
            "filter": self.filter,
            "tags": dict(self.tags),
        }
