"""
Shared fixtures: an isolated in-memory store and fakes for the Airtable
mirror and the Secrets Manager client.
"""
import json
import os
from itertools import count

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient

# Ensure we default to memory backend for tests to avoid AWS dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")
os.environ.pop("ENABLE_API_KEY_AUTH", None)

from todo_sync.dependencies import get_mirror  # noqa: E402
from todo_sync.main import app  # noqa: E402
from todo_sync.repositories import InMemoryRepository, StorageError, get_repository  # noqa: E402


class FakeMirror:
    """Stands in for AirtableClient.mirror_todo."""

    def __init__(self, record_id=None):
        self.record_id = record_id
        self.calls = []

    def mirror_todo(self, todo):
        self.calls.append(dict(todo))
        return self.record_id


class FailingRepository(InMemoryRepository):
    """In-memory store whose writes and scans fail, optionally for one external id only."""

    def __init__(self, fail_external_id=None, fail_scan=False):
        super().__init__()
        self.fail_external_id = fail_external_id
        self.fail_scan = fail_scan

    def upsert(self, todo):
        if self.fail_external_id is None or todo.get("externalRecordId") == self.fail_external_id:
            raise StorageError("put_item failed: boom")
        super().upsert(todo)

    def scan_all(self):
        if self.fail_scan:
            raise StorageError("scan failed: boom")
        return super().scan_all()


class FakeSecretsClient:
    """Minimal Secrets Manager client recording get_secret_value calls."""

    def __init__(self, api_key="valid-secret-key", secret_string=None, error=None):
        self.calls = []
        self.error = error
        if secret_string is None and api_key is not None:
            secret_string = json.dumps({"apiKey": api_key})
        self.secret_string = secret_string

    def get_secret_value(self, SecretId):
        self.calls.append(SecretId)
        if self.error is not None:
            raise self.error
        resp = {"Name": SecretId}
        if self.secret_string is not None:
            resp["SecretString"] = self.secret_string
        return resp


def client_error(operation="GetSecretValue", code="InternalServiceError"):
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, operation)


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def iso_clock(*stamps):
    """Clock returning the given ISO timestamps in order."""
    it = iter(stamps)
    return lambda: next(it)


def sequential_ids(prefix="todo"):
    counter = count(1)
    return lambda: f"{prefix}-{next(counter)}"


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def mirror():
    return FakeMirror()


@pytest.fixture
def client(repo, mirror):
    app.dependency_overrides[get_repository] = lambda: repo
    app.dependency_overrides[get_mirror] = lambda: mirror
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
