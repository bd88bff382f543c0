"""Unit tests for bucket lifecycle management through the S3 API."""

from __future__ import annotations

from datetime import date, datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError
from prometheus_client import REGISTRY

from s3_ilm_operator.lifecycle.models import (
    AndFilter,
    ExpirationDate,
    ExpirationDays,
    ExpirationDeleteMarker,
    PrefixFilter,
    Rule,
    Tag,
    TransitionDate,
    TransitionDays,
)
from s3_ilm_operator.services.aws.client import S3LifecycleClient, _rule_from_aws_format, _rule_to_aws_format


@pytest.fixture(autouse=True)
def no_rate_limit():
    """Disable S3 rate limiting."""
    with patch("s3_ilm_operator.services.aws.client.s3_throttle", lambda fn: fn):
        yield


class TestBucketLifecycle:
    """Test bucket lifecycle management."""

    @pytest.fixture
    def provider(self) -> S3LifecycleClient:
        """Create a test provider with a mocked client."""
        provider = S3LifecycleClient(
            endpoint="https://s3.example.com",
            region="us-east-1",
            access_key="test-access-key",
            secret_key="test-secret-key",
        )
        provider.client = MagicMock()
        return provider

    def test_get_bucket_lifecycle_exists(self, provider: S3LifecycleClient) -> None:
        """Test getting lifecycle configuration when it exists."""
        provider.client.get_bucket_lifecycle_configuration.return_value = {
            "Rules": [
                {
                    "ID": "test-rule",
                    "Status": "Enabled",
                    "Filter": {"Prefix": "logs/"},
                    "Expiration": {"Days": 30},
                }
            ]
        }

        result = provider.get_bucket_lifecycle("test-bucket")

        assert result == [
            Rule(id="test-rule", expiration=ExpirationDays(30), status="Enabled", filter=PrefixFilter("logs/"))
        ]
        provider.client.get_bucket_lifecycle_configuration.assert_called_once_with(Bucket="test-bucket")

    def test_get_bucket_lifecycle_not_exists(self, provider: S3LifecycleClient) -> None:
        """Test getting lifecycle configuration when it doesn't exist."""
        provider.client.get_bucket_lifecycle_configuration.side_effect = ClientError(
            {"Error": {"Code": "NoSuchLifecycleConfiguration"}}, "GetBucketLifecycleConfiguration"
        )

        assert provider.get_bucket_lifecycle("test-bucket") == []

    def test_get_bucket_lifecycle_error(self, provider: S3LifecycleClient) -> None:
        """Test error handling when getting lifecycle fails."""
        provider.client.get_bucket_lifecycle_configuration.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied"}}, "GetBucketLifecycleConfiguration"
        )

        with pytest.raises(ClientError):
            provider.get_bucket_lifecycle("test-bucket")

    def test_set_bucket_lifecycle_simple(self, provider: S3LifecycleClient) -> None:
        """Test setting a simple lifecycle rule."""
        rules = [Rule(id="r1", expiration=ExpirationDays(5), status="Enabled", filter=PrefixFilter("tmp/"))]

        provider.set_bucket_lifecycle("test-bucket", rules)

        provider.client.put_bucket_lifecycle_configuration.assert_called_once_with(
            Bucket="test-bucket",
            LifecycleConfiguration={
                "Rules": [
                    {
                        "ID": "r1",
                        "Status": "Enabled",
                        "Filter": {"Prefix": "tmp/"},
                        "Expiration": {"Days": 5},
                    }
                ]
            },
        )

    def test_set_bucket_lifecycle_multiple_rules_keep_order(self, provider: S3LifecycleClient) -> None:
        """Test that all rules are sent in order in one call."""
        rules = [Rule(id=f"r{i}", expiration=ExpirationDays(i + 1), status="Enabled") for i in range(3)]

        provider.set_bucket_lifecycle("test-bucket", rules)

        config = provider.client.put_bucket_lifecycle_configuration.call_args.kwargs["LifecycleConfiguration"]
        assert [rule["ID"] for rule in config["Rules"]] == ["r0", "r1", "r2"]

    def test_set_bucket_lifecycle_empty_deletes(self, provider: S3LifecycleClient) -> None:
        """Test that an empty rule list removes the configuration."""
        provider.set_bucket_lifecycle("test-bucket", [])

        provider.client.delete_bucket_lifecycle.assert_called_once_with(Bucket="test-bucket")
        provider.client.put_bucket_lifecycle_configuration.assert_not_called()

    def test_delete_bucket_lifecycle_already_absent(self, provider: S3LifecycleClient) -> None:
        """Test that deleting a missing configuration succeeds."""
        provider.client.delete_bucket_lifecycle.side_effect = ClientError(
            {"Error": {"Code": "NoSuchLifecycleConfiguration"}}, "DeleteBucketLifecycle"
        )

        provider.delete_bucket_lifecycle("test-bucket")

    def test_set_bucket_lifecycle_error(self, provider: S3LifecycleClient, access_denied: ClientError) -> None:
        """Test error handling when setting lifecycle fails."""
        provider.client.put_bucket_lifecycle_configuration.side_effect = access_denied

        with pytest.raises(ClientError):
            provider.set_bucket_lifecycle("test-bucket", [Rule(id="r1", expiration=ExpirationDays(1), status="Enabled")])

    def test_calls_are_counted(self, provider: S3LifecycleClient, access_denied: ClientError) -> None:
        """Test that store calls are counted by operation and result."""
        labels = {"api_type": "s3", "operation": "get_bucket_lifecycle_configuration"}
        before_ok = REGISTRY.get_sample_value("s3_ilm_operator_api_call_total", {**labels, "result": "success"}) or 0.0
        before_err = REGISTRY.get_sample_value("s3_ilm_operator_api_call_total", {**labels, "result": "error"}) or 0.0

        provider.client.get_bucket_lifecycle_configuration.return_value = {"Rules": []}
        provider.get_bucket_lifecycle("test-bucket")
        provider.client.get_bucket_lifecycle_configuration.side_effect = access_denied
        with pytest.raises(ClientError):
            provider.get_bucket_lifecycle("test-bucket")

        assert REGISTRY.get_sample_value("s3_ilm_operator_api_call_total", {**labels, "result": "success"}) == before_ok + 1
        assert REGISTRY.get_sample_value("s3_ilm_operator_api_call_total", {**labels, "result": "error"}) == before_err + 1


class TestRuleToAwsFormat:
    """Test conversion of lifecycle rules to the S3 API format."""

    def test_and_filter_with_tags(self) -> None:
        """Test that tags produce a sorted AND filter."""
        rule = Rule(
            id="r2",
            expiration=ExpirationDeleteMarker(),
            noncurrent_version_expiration_days=30,
            status="Enabled",
            filter=AndFilter("", frozenset({Tag("z", "1"), Tag("a", "2")})),
        )

        assert _rule_to_aws_format(rule) == {
            "ID": "r2",
            "Status": "Enabled",
            "Filter": {"And": {"Prefix": "", "Tags": [{"Key": "a", "Value": "2"}, {"Key": "z", "Value": "1"}]}},
            "Expiration": {"ExpiredObjectDeleteMarker": True},
            "NoncurrentVersionExpiration": {"NoncurrentDays": 30},
        }

    def test_date_expiration(self) -> None:
        """Test that dates are sent as midnight UTC."""
        rule = Rule(id="r1", expiration=ExpirationDate(date(2030, 1, 2)), status="Enabled")

        aws_rule = _rule_to_aws_format(rule)

        assert aws_rule["Expiration"] == {"Date": datetime(2030, 1, 2, tzinfo=timezone.utc)}

    def test_transitions(self) -> None:
        """Test days and date transitions."""
        by_days = _rule_to_aws_format(Rule(id="r1", transition=TransitionDays(30, "GLACIER"), status="Enabled"))
        by_date = _rule_to_aws_format(
            Rule(id="r2", transition=TransitionDate(date(2030, 1, 1), "GLACIER"), status="Enabled")
        )

        assert by_days["Transitions"] == [{"Days": 30, "StorageClass": "GLACIER"}]
        assert by_date["Transitions"] == [
            {"Date": datetime(2030, 1, 1, tzinfo=timezone.utc), "StorageClass": "GLACIER"}
        ]
        assert "Expiration" not in by_days

    def test_noncurrent_transition(self) -> None:
        """Test noncurrent version transition days."""
        aws_rule = _rule_to_aws_format(Rule(id="r1", noncurrent_version_transition_days=7, status="Enabled"))

        assert aws_rule["NoncurrentVersionTransitions"] == [{"NoncurrentDays": 7}]
        assert "NoncurrentVersionExpiration" not in aws_rule


class TestRuleFromAwsFormat:
    """Test conversion of S3 API lifecycle rules."""

    def test_round_trip(self) -> None:
        """Test that a converted rule converts back unchanged."""
        rule = Rule(
            id="r1",
            expiration=ExpirationDate(date(2030, 1, 2)),
            transition=TransitionDays(30, "GLACIER"),
            noncurrent_version_expiration_days=10,
            noncurrent_version_transition_days=5,
            status="Enabled",
            filter=AndFilter("logs/", frozenset({Tag("env", "prod")})),
        )

        assert _rule_from_aws_format(_rule_to_aws_format(rule)) == rule

    def test_legacy_top_level_prefix(self) -> None:
        """Test rules that carry their prefix outside the filter."""
        rule = _rule_from_aws_format({"ID": "old", "Status": "Disabled", "Prefix": "archive/"})

        assert rule.filter == PrefixFilter("archive/")
        assert rule.status == "Disabled"
        assert rule.expiration is None

    def test_single_tag_filter(self) -> None:
        """Test a filter holding a single tag."""
        rule = _rule_from_aws_format({"ID": "t", "Status": "Enabled", "Filter": {"Tag": {"Key": "k", "Value": "v"}}})

        assert rule.filter == AndFilter("", frozenset({Tag("k", "v")}))

    def test_date_string(self) -> None:
        """Test dates returned as ISO strings."""
        rule = _rule_from_aws_format(
            {"ID": "d", "Status": "Enabled", "Expiration": {"Date": "2030-01-02T00:00:00.000Z"}}
        )

        assert rule.expiration == ExpirationDate(date(2030, 1, 2))

    def test_delete_marker(self) -> None:
        """Test expired object delete marker expiration."""
        rule = _rule_from_aws_format(
            {"ID": "m", "Status": "Enabled", "Expiration": {"ExpiredObjectDeleteMarker": True}}
        )

        assert rule.expiration == ExpirationDeleteMarker()
