"""Shared fixtures for unit tests."""

from __future__ import annotations

import pytest
from botocore.exceptions import ClientError

from s3_ilm_operator.lifecycle.models import Rule


class FakeLifecycleStore:
    """In-memory lifecycle store with full-replace semantics."""

    def __init__(self) -> None:
        self.configs: dict[str, list[Rule]] = {}
        self.set_calls: list[tuple[str, list[Rule]]] = []
        self.get_calls: list[str] = []
        self.get_error: Exception | None = None
        self.set_error: Exception | None = None

    def get_bucket_lifecycle(self, name: str) -> list[Rule]:
        self.get_calls.append(name)
        if self.get_error is not None:
            raise self.get_error
        return list(self.configs.get(name, []))

    def set_bucket_lifecycle(self, name: str, rules: list[Rule]) -> None:
        self.set_calls.append((name, list(rules)))
        if self.set_error is not None:
            raise self.set_error
        if rules:
            self.configs[name] = list(rules)
        else:
            self.configs.pop(name, None)


@pytest.fixture
def store() -> FakeLifecycleStore:
    """Create an empty in-memory lifecycle store."""
    return FakeLifecycleStore()


@pytest.fixture
def access_denied() -> ClientError:
    """Create an AccessDenied client error."""
    return ClientError({"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutBucketLifecycleConfiguration")
