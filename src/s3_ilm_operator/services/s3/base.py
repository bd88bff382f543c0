"""Lifecycle store interface consumed by the reconciliation state machine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ...lifecycle.models import Rule


class LifecycleStore(Protocol):
    """Whole-configuration access to a bucket's lifecycle rules."""

    def get_bucket_lifecycle(self, name: str) -> list[Rule]:
        """Return the store's canonical rule list, empty when none is configured."""
        ...

    def set_bucket_lifecycle(self, name: str, rules: list[Rule]) -> None:
        """Replace the configuration with ``rules``; an empty list clears it."""
        ...
