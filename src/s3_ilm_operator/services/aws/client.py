"""boto3 implementation of the lifecycle store."""

from __future__ import annotations

import logging
import time
from datetime import date, datetime, timezone
from typing import Any, Callable

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from ... import metrics
from ...lifecycle.expiration import parse_date
from ...lifecycle.models import (
    AndFilter,
    ExpirationDate,
    ExpirationDays,
    ExpirationDeleteMarker,
    Expiration,
    Filter,
    PrefixFilter,
    Rule,
    Tag,
    Transition,
    TransitionDate,
    TransitionDays,
)
from ...utils.rate_limit import s3_throttle

logger = logging.getLogger(__name__)

NO_LIFECYCLE_CONFIGURATION = "NoSuchLifecycleConfiguration"


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


class S3LifecycleClient:
    """Reads and replaces bucket lifecycle configurations over the S3 API."""

    def __init__(
        self,
        endpoint: str,
        region: str,
        access_key: str,
        secret_key: str,
        path_style: bool = True,
        insecure_skip_verify: bool = False,
    ) -> None:
        self.endpoint = endpoint
        self.region = region
        session = boto3.Session(
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
        )
        self.client = session.client(
            "s3",
            endpoint_url=endpoint,
            config=Config(
                signature_version="s3v4",
                s3={"addressing_style": "path" if path_style else "virtual"},
                retries={"mode": "standard"},
            ),
            verify=not insecure_skip_verify,
        )

    def _call(self, operation: str, **kwargs: Any) -> Any:
        """Invoke one S3 operation, throttled and measured."""
        method: Callable[..., Any] = getattr(self.client, operation)
        started = time.monotonic()
        result = "error"
        try:
            response = s3_throttle(method)(**kwargs)
            result = "success"
            return response
        finally:
            metrics.api_call_total.labels(api_type="s3", operation=operation, result=result).inc()
            metrics.api_call_duration_seconds.labels(api_type="s3", operation=operation).observe(
                time.monotonic() - started
            )

    def get_bucket_lifecycle(self, name: str) -> list[Rule]:
        """Fetch the bucket's rules in the order the store returns them.

        Returns:
            Decoded rules; empty when the bucket has no lifecycle configuration
        """
        try:
            response = self._call("get_bucket_lifecycle_configuration", Bucket=name)
        except ClientError as e:
            if _error_code(e) == NO_LIFECYCLE_CONFIGURATION:
                return []
            logger.error(f"Reading lifecycle configuration of bucket {name} failed: {e}")
            raise
        return [_rule_from_aws_format(aws_rule) for aws_rule in response.get("Rules", [])]

    def set_bucket_lifecycle(self, name: str, rules: list[Rule]) -> None:
        """Replace the bucket's lifecycle configuration with ``rules``.

        S3 refuses a configuration without rules, so an empty list deletes
        the configuration instead.
        """
        if not rules:
            self.delete_bucket_lifecycle(name)
            return

        configuration = {"Rules": [_rule_to_aws_format(rule) for rule in rules]}
        logger.debug(f"Writing lifecycle configuration of bucket {name}: {configuration}")
        try:
            self._call("put_bucket_lifecycle_configuration", Bucket=name, LifecycleConfiguration=configuration)
        except ClientError as e:
            logger.error(f"Writing lifecycle configuration of bucket {name} failed: {e}")
            raise

    def delete_bucket_lifecycle(self, name: str) -> None:
        """Remove the bucket's lifecycle configuration; a missing one is not an error."""
        try:
            self._call("delete_bucket_lifecycle", Bucket=name)
        except ClientError as e:
            if _error_code(e) == NO_LIFECYCLE_CONFIGURATION:
                return
            logger.error(f"Deleting lifecycle configuration of bucket {name} failed: {e}")
            raise


def _to_aws_date(value: date) -> datetime:
    # S3 only accepts lifecycle dates at midnight UTC
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def _from_aws_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_date(value[:10])
    return None


def _filter_to_aws_format(rule_filter: Filter) -> dict[str, Any]:
    if isinstance(rule_filter, AndFilter):
        tags = sorted(rule_filter.tags, key=lambda tag: (tag.key, tag.value))
        return {
            "And": {
                "Prefix": rule_filter.prefix,
                "Tags": [{"Key": tag.key, "Value": tag.value} for tag in tags],
            }
        }
    return {"Prefix": rule_filter.prefix}


def _filter_from_aws_format(aws_rule: dict[str, Any]) -> Filter:
    aws_filter = aws_rule.get("Filter")
    if aws_filter is None:
        # Legacy rules carry the prefix at the top level
        return PrefixFilter(aws_rule.get("Prefix", ""))

    if "And" in aws_filter:
        and_filter = aws_filter["And"]
        tags = frozenset(Tag(t["Key"], t["Value"]) for t in and_filter.get("Tags", []))
        return AndFilter(prefix=and_filter.get("Prefix", ""), tags=tags)
    if "Tag" in aws_filter:
        tag = aws_filter["Tag"]
        return AndFilter(prefix="", tags=frozenset({Tag(tag["Key"], tag["Value"])}))
    return PrefixFilter(aws_filter.get("Prefix", ""))


def _expiration_to_aws_format(expiration: Expiration) -> dict[str, Any] | None:
    if isinstance(expiration, ExpirationDeleteMarker):
        return {"ExpiredObjectDeleteMarker": True}
    if isinstance(expiration, ExpirationDays):
        return {"Days": expiration.days}
    if isinstance(expiration, ExpirationDate):
        return {"Date": _to_aws_date(expiration.date)}
    return None


def _expiration_from_aws_format(aws_expiration: dict[str, Any] | None) -> Expiration:
    if not aws_expiration:
        return None
    if aws_expiration.get("ExpiredObjectDeleteMarker"):
        return ExpirationDeleteMarker()
    if aws_expiration.get("Days") is not None:
        return ExpirationDays(int(aws_expiration["Days"]))
    expiration_date = _from_aws_date(aws_expiration.get("Date"))
    if expiration_date is not None:
        return ExpirationDate(expiration_date)
    return None


def _transition_to_aws_format(transition: Transition) -> dict[str, Any] | None:
    if isinstance(transition, TransitionDays):
        return {"Days": transition.days, "StorageClass": transition.storage_class}
    if isinstance(transition, TransitionDate):
        return {"Date": _to_aws_date(transition.date), "StorageClass": transition.storage_class}
    return None


def _transition_from_aws_format(aws_transitions: list[dict[str, Any]] | None) -> Transition:
    if not aws_transitions:
        return None
    aws_transition = aws_transitions[0]
    storage_class = aws_transition.get("StorageClass", "")
    if aws_transition.get("Days") is not None:
        return TransitionDays(int(aws_transition["Days"]), storage_class)
    transition_date = _from_aws_date(aws_transition.get("Date"))
    if transition_date is not None:
        return TransitionDate(transition_date, storage_class)
    return None


def _rule_to_aws_format(rule: Rule) -> dict[str, Any]:
    """Convert a lifecycle rule to the S3 API format."""
    aws_rule: dict[str, Any] = {
        "ID": rule.id,
        "Status": rule.status,
        "Filter": _filter_to_aws_format(rule.filter),
    }

    expiration = _expiration_to_aws_format(rule.expiration)
    if expiration is not None:
        aws_rule["Expiration"] = expiration

    transition = _transition_to_aws_format(rule.transition)
    if transition is not None:
        aws_rule["Transitions"] = [transition]

    if rule.noncurrent_version_expiration_days:
        aws_rule["NoncurrentVersionExpiration"] = {
            "NoncurrentDays": rule.noncurrent_version_expiration_days,
        }
    if rule.noncurrent_version_transition_days:
        aws_rule["NoncurrentVersionTransitions"] = [
            {"NoncurrentDays": rule.noncurrent_version_transition_days},
        ]

    return aws_rule


def _rule_from_aws_format(aws_rule: dict[str, Any]) -> Rule:
    """Convert an S3 API lifecycle rule to a lifecycle rule."""
    noncurrent_expiration = aws_rule.get("NoncurrentVersionExpiration") or {}
    noncurrent_transitions = aws_rule.get("NoncurrentVersionTransitions") or [{}]

    return Rule(
        id=aws_rule.get("ID", ""),
        expiration=_expiration_from_aws_format(aws_rule.get("Expiration")),
        transition=_transition_from_aws_format(aws_rule.get("Transitions")),
        noncurrent_version_expiration_days=noncurrent_expiration.get("NoncurrentDays") or None,
        noncurrent_version_transition_days=noncurrent_transitions[0].get("NoncurrentDays") or None,
        status=aws_rule.get("Status", ""),
        filter=_filter_from_aws_format(aws_rule),
    )
