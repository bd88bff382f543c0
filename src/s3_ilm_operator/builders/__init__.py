"""Builders turning CRD specs into typed configuration and clients."""

from .ilm_policy import ILMPolicyConfig, create_ilm_policy_config_from_spec
from .provider import ProviderConfig, ProviderError, create_provider_config_from_spec, create_store

__all__ = [
    "ILMPolicyConfig",
    "ProviderConfig",
    "ProviderError",
    "create_ilm_policy_config_from_spec",
    "create_provider_config_from_spec",
    "create_store",
]
