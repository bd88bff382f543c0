"""Builder for lifecycle store clients from Provider resources.

A Provider names an S3-compatible endpoint and the Secret holding its
credentials::

    spec:
      endpoint: https://play.min.io
      region: us-east-1
      pathStyle: true
      insecureSkipVerify: false
      credentialsSecretRef:
        name: minio-credentials
        accessKeyKey: access-key
        secretKeyKey: secret-key
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from kubernetes import client

from ..services.aws.client import S3LifecycleClient
from ..utils.secrets import read_secret_value


class ProviderError(ValueError):
    """A Provider spec cannot be turned into a store client."""


@dataclass(frozen=True)
class ProviderConfig:
    """Validated Provider connection settings."""

    endpoint: str
    region: str
    secret_name: str
    access_key_key: str = "access-key"
    secret_key_key: str = "secret-key"
    path_style: bool = True
    insecure_skip_verify: bool = False


def create_provider_config_from_spec(spec: dict[str, Any]) -> ProviderConfig:
    """Validate a Provider spec.

    Raises:
        ProviderError: If the endpoint, region or credentials reference is missing
    """
    missing = [field for field in ("endpoint", "region") if not spec.get(field)]
    secret_ref = spec.get("credentialsSecretRef") or {}
    if not secret_ref.get("name"):
        missing.append("credentialsSecretRef.name")
    if missing:
        raise ProviderError(f"Provider is missing {', '.join(missing)}")

    return ProviderConfig(
        endpoint=spec["endpoint"],
        region=spec["region"],
        secret_name=secret_ref["name"],
        access_key_key=secret_ref.get("accessKeyKey", "access-key"),
        secret_key_key=secret_ref.get("secretKeyKey", "secret-key"),
        path_style=bool(spec.get("pathStyle", True)),
        insecure_skip_verify=bool(spec.get("insecureSkipVerify", False)),
    )


def create_store(provider_config: ProviderConfig, namespace: str, core_api: client.CoreV1Api) -> S3LifecycleClient:
    """Create a store client with credentials read from the Provider's namespace.

    Raises:
        MissingSecretError: If the credentials Secret or one of its keys is missing
    """
    def read(key: str) -> str:
        return read_secret_value(core_api, namespace, provider_config.secret_name, key)

    return S3LifecycleClient(
        endpoint=provider_config.endpoint,
        region=provider_config.region,
        access_key=read(provider_config.access_key_key),
        secret_key=read(provider_config.secret_key_key),
        path_style=provider_config.path_style,
        insecure_skip_verify=provider_config.insecure_skip_verify,
    )
