"""Reading store credentials out of Kubernetes Secrets."""

from __future__ import annotations

import base64

from kubernetes import client


class MissingSecretError(LookupError):
    """A referenced Secret or one of its keys does not exist."""


def read_secret_value(api: client.CoreV1Api, namespace: str, name: str, key: str) -> str:
    """Read and decode one key of a Secret.

    Raises:
        MissingSecretError: If the Secret or the key does not exist
        client.exceptions.ApiException: For any other API failure
    """
    try:
        secret = api.read_namespaced_secret(name=name, namespace=namespace)
    except client.exceptions.ApiException as e:
        if e.status == 404:
            raise MissingSecretError(f"Secret {namespace}/{name} does not exist") from e
        raise

    encoded = (secret.data or {}).get(key)
    if encoded is None:
        raise MissingSecretError(f"Secret {namespace}/{name} has no key {key!r}")
    return base64.b64decode(encoded).decode("utf-8")
