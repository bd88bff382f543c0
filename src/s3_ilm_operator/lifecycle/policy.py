"""Reconciliation state machine for a bucket's lifecycle configuration.

An ``ILMPolicyResource`` mirrors the lifecycle configuration of one bucket.
It is Absent while ``id`` is empty and Present once ``id`` holds the bucket
name. Every write replaces the whole rule list; an empty list clears the
configuration.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from .. import metrics
from ..services.s3.base import LifecycleStore
from .errors import LifecycleReadError, ResourceError
from .models import RuleInput
from .rules import build_rules, decode_rules, rules_differ

logger = logging.getLogger(__name__)


class ILMPolicyResource:
    """Local mirror of a bucket's lifecycle configuration."""

    def __init__(
        self,
        store: LifecycleStore,
        id: str = "",
        rules: Sequence[RuleInput] | None = None,
        strict_read: bool = False,
    ) -> None:
        """Initialize the resource.

        Args:
            store: Lifecycle store client
            id: Identity from a previous run (the bucket name), empty when Absent
            rules: Previously mirrored rules
            strict_read: Raise LifecycleReadError on read failures instead of
                treating them as absence
        """
        self.store = store
        self.id = id
        self.bucket = id
        self.rules: list[RuleInput] = list(rules or [])
        self.strict_read = strict_read

    @property
    def exists(self) -> bool:
        return bool(self.id)

    def create(self, bucket: str, rule_inputs: Sequence[RuleInput]) -> None:
        """Submit the full rule list for a bucket and mirror the result.

        Raises:
            ResourceError: If the store rejects the configuration
        """
        self._apply(bucket, rule_inputs, "creating bucket lifecycle failed", operation="create")
        self.read()

    def read(self) -> None:
        """Refresh the mirrored rules from the store.

        A failed fetch clears the identity instead of raising, unless strict
        reads are enabled. Note this also hides transient I/O failures.

        Raises:
            LifecycleReadError: If the fetch failed and strict reads are enabled
        """
        if not self.exists:
            return

        try:
            rules = self.store.get_bucket_lifecycle(self.id)
        except Exception as e:
            metrics.lifecycle_operations_total.labels(operation="read", result="failed").inc()
            if self.strict_read:
                raise LifecycleReadError("reading lifecycle configuration failed", self.id, e) from e
            logger.warning(f"reading lifecycle configuration failed for bucket {self.id}: {e}")
            self._clear()
            return

        metrics.lifecycle_operations_total.labels(operation="read", result="success").inc()
        self.bucket = self.id
        self.rules = decode_rules(rules)

    def update(self, bucket: str, rule_inputs: Sequence[RuleInput]) -> None:
        """Converge the bucket to the given rules, then refresh the mirror.

        The store is only written when the rules differ from the mirrored
        state. Moving the policy to another bucket clears the old bucket's
        configuration first.

        Raises:
            ResourceError: If a store write fails
        """
        if self.exists and bucket != self.id:
            logger.info(f"Lifecycle policy moved from bucket {self.id} to {bucket}, replacing")
            self.delete()

        if not self.exists:
            self.create(bucket, rule_inputs)
            return

        if rules_differ(self.rules, rule_inputs):
            self._apply(bucket, rule_inputs, "updating bucket lifecycle failed", operation="update")
        else:
            logger.debug(f"Lifecycle rules for bucket {bucket} unchanged")

        self.read()

    def delete(self) -> None:
        """Clear the bucket's lifecycle configuration.

        The identity is kept when the store call fails so the deletion can be
        retried.

        Raises:
            ResourceError: If the store rejects the empty configuration
        """
        if not self.exists:
            logger.debug("Lifecycle policy is already absent, nothing to delete")
            return

        try:
            self.store.set_bucket_lifecycle(self.id, [])
        except Exception as e:
            metrics.lifecycle_operations_total.labels(operation="delete", result="failed").inc()
            raise ResourceError("deleting lifecycle configuration failed", self.id, e) from e

        metrics.lifecycle_operations_total.labels(operation="delete", result="success").inc()
        logger.info(f"Deleted lifecycle configuration for bucket {self.id}")
        self._clear()

    def import_state(self, bucket: str) -> None:
        """Adopt an existing lifecycle configuration by bucket name."""
        self.id = bucket
        self.bucket = bucket
        self.rules = []
        self.read()

    def to_status(self) -> dict[str, Any]:
        """Serialize the mirrored state for the resource status."""
        return {
            "id": self.id or None,
            "bucket": self.bucket or None,
            "rules": [rule.to_dict() for rule in self.rules],
            "ruleCount": len(self.rules),
        }

    @classmethod
    def from_status(
        cls,
        store: LifecycleStore,
        status: dict[str, Any],
        strict_read: bool = False,
    ) -> ILMPolicyResource:
        """Rebuild the resource from a previously written status."""
        return cls(
            store,
            id=status.get("id") or "",
            rules=[RuleInput.from_dict(rule) for rule in status.get("rules") or []],
            strict_read=strict_read,
        )

    def _apply(self, bucket: str, rule_inputs: Sequence[RuleInput], message: str, operation: str) -> None:
        rules = build_rules(bucket, rule_inputs)
        try:
            self.store.set_bucket_lifecycle(bucket, rules)
        except Exception as e:
            metrics.lifecycle_operations_total.labels(operation=operation, result="failed").inc()
            raise ResourceError(message, bucket, e) from e

        metrics.lifecycle_operations_total.labels(operation=operation, result="success").inc()
        metrics.lifecycle_rules_written_total.inc(len(rules))
        logger.info(f"Applied {len(rules)} lifecycle rules to bucket {bucket}")
        self.id = bucket
        self.bucket = bucket
        # Keep the desired order until the store reports its own
        self.rules = list(rule_inputs)

    def _clear(self) -> None:
        self.id = ""
        self.bucket = ""
        self.rules = []
