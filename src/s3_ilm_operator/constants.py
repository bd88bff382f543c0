"""Constants for the S3 ILM Operator."""

CONTROLLER_NAME = "s3-ilm-operator"

# Custom resources
API_GROUP = "s3.cloud37.dev"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"
KIND_ILM_POLICY = "ILMPolicy"
KIND_PROVIDER = "Provider"
PLURAL_PROVIDERS = "providers"

# Lifecycle rules
RULE_STATUS_ENABLED = "Enabled"
EXPIRATION_DELETE_MARKER = "DeleteMarker"
MAX_BUCKET_NAME_LENGTH = 63

# ILMPolicy status conditions
COND_READY = "Ready"
COND_POLICY_INVALID = "PolicyInvalid"
COND_PROVIDER_UNAVAILABLE = "ProviderUnavailable"
COND_APPLY_FAILED = "ApplyFailed"

# ILMPolicy event reasons
EVENT_REASON_VALIDATE_FAILED = "ValidateFailed"
EVENT_REASON_PROVIDER_UNAVAILABLE = "ProviderUnavailable"
EVENT_REASON_LIFECYCLE_ADOPTED = "LifecycleAdopted"
EVENT_REASON_LIFECYCLE_APPLIED = "LifecycleApplied"
EVENT_REASON_LIFECYCLE_DELETED = "LifecycleDeleted"
EVENT_REASON_LIFECYCLE_DRIFT = "LifecycleDriftDetected"
EVENT_REASON_LIFECYCLE_FAILED = "LifecycleFailed"
