"""Status reporting for ILMPolicy resources."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import COND_APPLY_FAILED, COND_POLICY_INVALID, COND_PROVIDER_UNAVAILABLE, COND_READY
from ..lifecycle.policy import ILMPolicyResource
from ..utils.conditions import clear_condition, set_condition


class PolicyStatus:
    """Conditions and mirrored lifecycle state of one ILMPolicy reconcile.

    ``observedGeneration`` is only written once a generation has been fully
    judged, either rejected as invalid or converged. Drift checks rely on it
    to tell spec edits apart from out-of-band changes, so a failed apply must
    leave it untouched.
    """

    def __init__(self, meta: dict[str, Any], status: dict[str, Any], patch: kopf.Patch) -> None:
        self.meta = meta
        self.patch = patch
        self.conditions = [dict(cond) for cond in status.get("conditions") or []]

    def invalid(self, message: str) -> None:
        self._set(COND_POLICY_INVALID, True, "ValidationFailed", message)
        self._set(COND_READY, False, "PolicyInvalid", message)
        self._publish(observed=True)

    def provider_unavailable(self, message: str) -> None:
        self._set(COND_PROVIDER_UNAVAILABLE, True, "ProviderUnavailable", message)
        self._set(COND_READY, False, "ProviderUnavailable", message)
        self._publish()

    def apply_failed(self, message: str, resource: ILMPolicyResource) -> None:
        self._clear(COND_POLICY_INVALID, COND_PROVIDER_UNAVAILABLE)
        self._set(COND_APPLY_FAILED, True, "ApplyFailed", message)
        self._set(COND_READY, False, "ApplyFailed", message)
        self._publish(resource)

    def not_mirrored(self, message: str, resource: ILMPolicyResource) -> None:
        self._clear(COND_POLICY_INVALID, COND_PROVIDER_UNAVAILABLE)
        self._set(COND_READY, False, "ReadFailed", message)
        self._publish(resource)

    def in_sync(self, resource: ILMPolicyResource) -> None:
        self._clear(COND_POLICY_INVALID, COND_PROVIDER_UNAVAILABLE, COND_APPLY_FAILED)
        self._set(COND_READY, True, "InSync", f"{len(resource.rules)} lifecycle rules applied to bucket {resource.bucket}")
        self._publish(resource, observed=True)

    def _set(self, cond_type: str, active: bool, reason: str, message: str) -> None:
        self.conditions = set_condition(self.conditions, cond_type, active, reason, message)

    def _clear(self, *cond_types: str) -> None:
        for cond_type in cond_types:
            self.conditions = clear_condition(self.conditions, cond_type)

    def _publish(self, resource: ILMPolicyResource | None = None, observed: bool = False) -> None:
        update: dict[str, Any] = {"conditions": self.conditions}
        if resource is not None:
            update.update(resource.to_status())
        if observed:
            update["observedGeneration"] = self.meta.get("generation", 0)
        self.patch.status.update(update)
