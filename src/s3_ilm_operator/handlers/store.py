"""Resolution of the lifecycle store an ILMPolicy writes to."""

from __future__ import annotations

import functools
import time
from typing import Any

from kubernetes import client, config

from .. import metrics
from ..builders.provider import ProviderError, create_provider_config_from_spec, create_store
from ..constants import API_GROUP, API_VERSION, PLURAL_PROVIDERS
from ..services.s3.base import LifecycleStore
from ..utils.cache import provider_cache
from ..utils.rate_limit import k8s_throttle, rate_limit_backoff
from ..utils.secrets import MissingSecretError


class StoreUnavailable(Exception):
    """No store client can be built for a policy.

    Attributes:
        missing: True when the Provider itself does not exist
    """

    def __init__(self, message: str, missing: bool = False) -> None:
        super().__init__(message)
        self.missing = missing


@functools.lru_cache(maxsize=None)
def _load_kube_config() -> None:
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


def custom_objects_api() -> client.CustomObjectsApi:
    _load_kube_config()
    return client.CustomObjectsApi()


def core_api() -> client.CoreV1Api:
    _load_kube_config()
    return client.CoreV1Api()


def fetch_provider(api: client.CustomObjectsApi, name: str, namespace: str) -> dict[str, Any]:
    """Get a Provider object, served from a short-lived cache when possible.

    Rate limited responses are retried with exponential backoff.

    Raises:
        client.exceptions.ApiException: If the Provider cannot be read
    """
    cached = provider_cache.get((namespace, name))
    if cached is not None:
        metrics.api_call_total.labels(api_type="k8s", operation="get_provider", result="cache_hit").inc()
        return cached

    attempt = 0
    while True:
        started = time.monotonic()
        try:
            provider_obj = k8s_throttle(api.get_namespaced_custom_object)(
                group=API_GROUP,
                version=API_VERSION,
                namespace=namespace,
                plural=PLURAL_PROVIDERS,
                name=name,
            )
        except client.exceptions.ApiException as e:
            metrics.api_call_total.labels(api_type="k8s", operation="get_provider", result="error").inc()
            delay = rate_limit_backoff(e, attempt)
            if delay is None:
                raise
            attempt += 1
            time.sleep(delay)
            continue
        finally:
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation="get_provider").observe(
                time.monotonic() - started
            )

        metrics.api_call_total.labels(api_type="k8s", operation="get_provider", result="success").inc()
        provider_cache.put((namespace, name), provider_obj)
        return provider_obj


def resolve_store(provider_name: str | None, namespace: str) -> LifecycleStore:
    """Build the store client for the Provider a policy references.

    Raises:
        StoreUnavailable: If the Provider is missing, invalid or its
            credentials cannot be read
        client.exceptions.ApiException: For other Kubernetes API failures
    """
    if not provider_name:
        raise StoreUnavailable("policy does not reference a Provider", missing=True)

    try:
        provider_obj = fetch_provider(custom_objects_api(), provider_name, namespace)
    except client.exceptions.ApiException as e:
        if e.status == 404:
            raise StoreUnavailable(f"Provider {namespace}/{provider_name} not found", missing=True) from e
        raise

    try:
        provider_config = create_provider_config_from_spec(provider_obj.get("spec") or {})
        return create_store(provider_config, namespace, core_api())
    except (ProviderError, MissingSecretError) as e:
        raise StoreUnavailable(f"Provider {namespace}/{provider_name}: {e}") from e
