"""Lifecycle rule codecs, assembler and reconciliation state machine."""

from .errors import (
    ILMFormatError,
    ILMRangeError,
    ILMValidationError,
    LifecycleReadError,
    ResourceError,
)
from .models import (
    AndFilter,
    ExpirationDate,
    ExpirationDays,
    ExpirationDeleteMarker,
    PrefixFilter,
    Rule,
    RuleInput,
    Tag,
    TransitionDate,
    TransitionDays,
    TransitionInput,
)
from .policy import ILMPolicyResource
from .rules import build_rule, build_rules, decode_rule, decode_rules

__all__ = [
    "AndFilter",
    "ExpirationDate",
    "ExpirationDays",
    "ExpirationDeleteMarker",
    "ILMFormatError",
    "ILMPolicyResource",
    "ILMRangeError",
    "ILMValidationError",
    "LifecycleReadError",
    "PrefixFilter",
    "ResourceError",
    "Rule",
    "RuleInput",
    "Tag",
    "TransitionDate",
    "TransitionDays",
    "TransitionInput",
    "build_rule",
    "build_rules",
    "decode_rule",
    "decode_rules",
]
