"""Handler for the ILMPolicy CRD."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager, suppress
from typing import Any, Callable, Iterator

import kopf

from .. import metrics
from ..builders.ilm_policy import ILMPolicyConfig, create_ilm_policy_config_from_spec
from ..constants import (
    API_GROUP_VERSION,
    EVENT_REASON_LIFECYCLE_ADOPTED,
    EVENT_REASON_LIFECYCLE_APPLIED,
    EVENT_REASON_LIFECYCLE_DELETED,
    EVENT_REASON_LIFECYCLE_DRIFT,
    EVENT_REASON_LIFECYCLE_FAILED,
    EVENT_REASON_PROVIDER_UNAVAILABLE,
    EVENT_REASON_VALIDATE_FAILED,
    KIND_ILM_POLICY,
)
from ..lifecycle.errors import ILMValidationError, ResourceError
from ..lifecycle.policy import ILMPolicyResource
from ..lifecycle.rules import rules_differ
from ..logging import policy_fields
from ..services.s3.base import LifecycleStore
from ..tracing import annotate, policy_span
from ..utils import events
from ..utils.errors import describe_error
from .status import PolicyStatus
from .store import StoreUnavailable, resolve_store

logger = logging.getLogger(__name__)

DRIFT_CHECK_INTERVAL_SECONDS = float(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300"))
APPLY_RETRY_DELAY_SECONDS = 30
PROVIDER_RETRY_DELAY_SECONDS = 60

StoreResolver = Callable[[str, str], LifecycleStore]


class ILMPolicyHandler:
    """Converges buckets to the lifecycle rules declared by ILMPolicy resources."""

    def __init__(self, store_resolver: StoreResolver = resolve_store) -> None:
        self.resolve_store = store_resolver

    def reconcile(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Apply the declared rules to the bucket and mirror the result in the status.

        Raises:
            kopf.PermanentError: If the spec is invalid
            kopf.TemporaryError: If the store is unavailable or rejects the rules
        """
        report = PolicyStatus(meta, status, patch)
        policy = self._load_policy(spec, meta, report)
        bucket = policy.bucket

        with policy_span("reconcile_ilm_policy", meta, bucket=bucket, rule_count=len(policy.rules)):
            store = self._store_for(policy, meta, report)
            resource = ILMPolicyResource.from_status(store, status, strict_read=policy.strict_read)
            spec_changed = status.get("observedGeneration") != meta.get("generation")

            try:
                if resource.exists:
                    resource.read()
                else:
                    resource = self._adopt(store, policy, meta)

                changed = not resource.exists or resource.id != bucket or rules_differ(resource.rules, policy.rules)
                if changed and resource.exists and not spec_changed:
                    self._report_drift(meta, bucket)

                resource.update(bucket, policy.rules)
            except ResourceError as e:
                message = describe_error(e)
                logger.error(message, extra=policy_fields(meta, "LifecycleApplyFailed", bucket=e.bucket))
                events.record(meta, EVENT_REASON_LIFECYCLE_FAILED, message, warning=True)
                report.apply_failed(message, resource)
                raise kopf.TemporaryError(message, delay=APPLY_RETRY_DELAY_SECONDS) from e

            annotate(changed=changed, mirrored_rules=len(resource.rules))
            if not resource.exists:
                message = f"Lifecycle configuration of bucket {bucket} could not be read back"
                logger.warning(message, extra=policy_fields(meta, "LifecycleReadFailed", bucket=bucket))
                report.not_mirrored(message, resource)
                raise kopf.TemporaryError(message, delay=APPLY_RETRY_DELAY_SECONDS)

            if changed:
                message = f"Applied {len(policy.rules)} lifecycle rules to bucket {bucket}"
                logger.info(message, extra=policy_fields(meta, EVENT_REASON_LIFECYCLE_APPLIED, bucket=bucket))
                events.record(meta, EVENT_REASON_LIFECYCLE_APPLIED, message)

            metrics.lifecycle_rules.labels(namespace=meta.get("namespace", "default"), policy=meta.get("name", "")).set(
                len(resource.rules)
            )
            report.in_sync(resource)

    def delete(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
    ) -> None:
        """Clear the lifecycle configuration this policy applied.

        A failure raises kopf.TemporaryError, which keeps kopf's finalizer in
        place so the deletion is retried against the same bucket. A policy
        whose Provider is gone is released without touching the bucket.
        """
        bucket = status.get("id")
        with suppress(KeyError):
            metrics.lifecycle_rules.remove(meta.get("namespace", "default"), meta.get("name", ""))
        if not bucket:
            logger.info("Policy never applied, nothing to clear", extra=policy_fields(meta, "Deletion"))
            return

        provider_ref = spec.get("providerRef") or {}
        namespace = provider_ref.get("namespace") or meta.get("namespace", "default")
        try:
            store = self.resolve_store(provider_ref.get("name"), namespace)
        except StoreUnavailable as e:
            message = describe_error(e)
            if not e.missing:
                raise kopf.TemporaryError(message, delay=PROVIDER_RETRY_DELAY_SECONDS) from e
            logger.warning(
                f"{message}, leaving the lifecycle configuration of bucket {bucket} in place",
                extra=policy_fields(meta, "ProviderNotFound", bucket=bucket),
            )
            return

        resource = ILMPolicyResource.from_status(store, status)
        with policy_span("delete_lifecycle", meta, bucket=bucket):
            try:
                resource.delete()
            except ResourceError as e:
                message = describe_error(e)
                logger.error(message, extra=policy_fields(meta, "LifecycleDeleteFailed", bucket=bucket))
                events.record(meta, EVENT_REASON_LIFECYCLE_FAILED, message, warning=True)
                raise kopf.TemporaryError(message, delay=APPLY_RETRY_DELAY_SECONDS) from e

        message = f"Removed the lifecycle configuration of bucket {bucket}"
        logger.info(message, extra=policy_fields(meta, EVENT_REASON_LIFECYCLE_DELETED, bucket=bucket))
        events.record(meta, EVENT_REASON_LIFECYCLE_DELETED, message)

    def _load_policy(self, spec: dict[str, Any], meta: dict[str, Any], report: PolicyStatus) -> ILMPolicyConfig:
        """Validate the spec before any store call; invalid specs are not retried."""
        try:
            return create_ilm_policy_config_from_spec(spec)
        except ILMValidationError as e:
            message = str(e)
            logger.error(message, extra=policy_fields(meta, EVENT_REASON_VALIDATE_FAILED))
            events.record(meta, EVENT_REASON_VALIDATE_FAILED, message, warning=True)
            report.invalid(message)
            raise kopf.PermanentError(message) from e

    def _store_for(self, policy: ILMPolicyConfig, meta: dict[str, Any], report: PolicyStatus) -> LifecycleStore:
        namespace = policy.provider_namespace or meta.get("namespace", "default")
        try:
            return self.resolve_store(policy.provider_name, namespace)
        except StoreUnavailable as e:
            message = describe_error(e)
            logger.warning(message, extra=policy_fields(meta, EVENT_REASON_PROVIDER_UNAVAILABLE))
            events.record(meta, EVENT_REASON_PROVIDER_UNAVAILABLE, message, warning=True)
            report.provider_unavailable(message)
            raise kopf.TemporaryError(message, delay=PROVIDER_RETRY_DELAY_SECONDS) from e

    def _adopt(self, store: LifecycleStore, policy: ILMPolicyConfig, meta: dict[str, Any]) -> ILMPolicyResource:
        """Take over a lifecycle configuration already present on the bucket.

        A bucket without rules stays Absent, so the first write is a create.
        """
        resource = ILMPolicyResource(store, strict_read=policy.strict_read)
        resource.import_state(policy.bucket)
        if not resource.rules:
            return ILMPolicyResource(store, strict_read=policy.strict_read)

        message = f"Adopted {len(resource.rules)} existing lifecycle rules of bucket {policy.bucket}"
        logger.info(message, extra=policy_fields(meta, EVENT_REASON_LIFECYCLE_ADOPTED, bucket=policy.bucket))
        events.record(meta, EVENT_REASON_LIFECYCLE_ADOPTED, message)
        return resource

    def _report_drift(self, meta: dict[str, Any], bucket: str) -> None:
        message = f"Lifecycle configuration of bucket {bucket} differs from the declared rules"
        logger.warning(message, extra=policy_fields(meta, EVENT_REASON_LIFECYCLE_DRIFT, bucket=bucket))
        events.record(meta, EVENT_REASON_LIFECYCLE_DRIFT, message, warning=True)
        metrics.drift_detected_total.labels(namespace=meta.get("namespace", "default"), policy=meta.get("name", "")).inc()


@contextmanager
def observe_reconcile() -> Iterator[None]:
    """Count and time one reconcile by its outcome."""
    started = time.monotonic()
    result = "error"
    try:
        yield
        result = "success"
    except kopf.TemporaryError:
        result = "retry"
        raise
    except kopf.PermanentError:
        result = "invalid"
        raise
    finally:
        metrics.reconcile_total.labels(result=result).inc()
        metrics.reconcile_duration_seconds.observe(time.monotonic() - started)


# Global handler instance
_handler = ILMPolicyHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_ILM_POLICY)
@kopf.on.update(API_GROUP_VERSION, KIND_ILM_POLICY)
@kopf.on.resume(API_GROUP_VERSION, KIND_ILM_POLICY)
@kopf.timer(API_GROUP_VERSION, KIND_ILM_POLICY, interval=DRIFT_CHECK_INTERVAL_SECONDS)
def handle_ilm_policy(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Reconcile an ILMPolicy on every change and periodically for drift."""
    with observe_reconcile():
        _handler.reconcile(spec, meta, status, patch)


@kopf.on.delete(API_GROUP_VERSION, KIND_ILM_POLICY)
def handle_ilm_policy_delete(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    **kwargs: Any,
) -> None:
    """Clear the bucket's lifecycle configuration before the policy goes away."""
    _handler.delete(spec, meta, status)
