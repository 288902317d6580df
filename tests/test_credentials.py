import json

import pytest

from conftest import FakeClock, FakeSecretsClient, client_error
from todo_sync.credentials import CACHE_TTL_SECONDS, ApiKeyProvider, SecretCache, is_authorized
from todo_sync.handlers import api_key_authorizer

METHOD_ARN = "arn:aws:execute-api:us-east-1:123456789012:abcdefghij/dev/GET/todos"


def make_provider(fake, clock=None, secret_name="test-api-key-secret"):
    return ApiKeyProvider(secret_name, client=fake, clock=clock or FakeClock())


def authorizer_event(headers=None):
    return {
        "type": "REQUEST",
        "methodArn": METHOD_ARN,
        "resource": "/todos",
        "path": "/todos",
        "httpMethod": "GET",
        "headers": headers if headers is not None else {},
    }


def effect(result):
    return result["policyDocument"]["Statement"][0]["Effect"]


class TestSecretCache:
    def test_fresh_value_is_returned_until_expiry(self):
        cache = SecretCache()
        assert cache.get(0) is None
        cache.put("k", now=100, ttl=300)
        assert cache.get(100) == "k"
        assert cache.get(399.9) == "k"
        assert cache.get(400) is None

    def test_clear(self):
        cache = SecretCache()
        cache.put("k", now=0, ttl=300)
        cache.clear()
        assert cache.get(1) is None
        assert cache.value is None


class TestApiKeyProvider:
    def test_second_call_within_ttl_uses_cache(self):
        fake = FakeSecretsClient(api_key="valid-secret-key")
        clock = FakeClock()
        provider = make_provider(fake, clock)
        assert provider.get_secret() == "valid-secret-key"
        clock.advance(CACHE_TTL_SECONDS - 1)
        assert provider.get_secret() == "valid-secret-key"
        assert fake.calls == ["test-api-key-secret"]

    def test_refetches_after_ttl(self):
        fake = FakeSecretsClient(api_key="valid-secret-key")
        clock = FakeClock()
        provider = make_provider(fake, clock)
        provider.get_secret()
        clock.advance(CACHE_TTL_SECONDS)
        provider.get_secret()
        assert len(fake.calls) == 2

    def test_reset_cache_forces_fetch(self):
        fake = FakeSecretsClient()
        provider = make_provider(fake)
        provider.get_secret()
        provider.cache.clear()
        provider.get_secret()
        assert len(fake.calls) == 2

    def test_missing_secret_name_returns_none_without_fetch(self):
        fake = FakeSecretsClient()
        provider = make_provider(fake, secret_name=None)
        assert provider.get_secret() is None
        assert fake.calls == []

    @pytest.mark.parametrize(
        "fake",
        [
            FakeSecretsClient(error=client_error()),
            FakeSecretsClient(api_key=None),
            FakeSecretsClient(secret_string="not json"),
            FakeSecretsClient(secret_string=json.dumps({"otherField": "value"})),
            FakeSecretsClient(secret_string=json.dumps(["apiKey"])),
        ],
        ids=["store-error", "no-secret-string", "malformed", "no-api-key-field", "not-an-object"],
    )
    def test_failures_return_none(self, fake):
        assert make_provider(fake).get_secret() is None

    def test_failures_are_not_cached(self):
        fake = FakeSecretsClient(error=client_error())
        provider = make_provider(fake)
        assert provider.get_secret() is None
        fake.error = None
        assert provider.get_secret() == "valid-secret-key"
        assert len(fake.calls) == 2


class TestIsAuthorized:
    @pytest.mark.parametrize(
        "presented, expected, allowed",
        [
            ("secret", "secret", True),
            ("secret", "Secret", False),
            ("secret ", "secret", False),
            (None, "secret", False),
            ("", "secret", False),
            ("secret", None, False),
            (None, None, False),
            ("", "", False),
        ],
    )
    def test_exact_match_only(self, presented, expected, allowed):
        assert is_authorized(presented, expected) is allowed


class TestApiKeyAuthorizer:
    def test_allows_valid_key(self):
        provider = make_provider(FakeSecretsClient(api_key="valid-secret-key"))
        result = api_key_authorizer(authorizer_event({"x-api-key": "valid-secret-key"}), provider=provider)
        assert result["principalId"] == "authorized-user"
        assert effect(result) == "Allow"
        assert result["policyDocument"]["Statement"][0]["Resource"] == METHOD_ARN

    def test_denies_wrong_key(self):
        provider = make_provider(FakeSecretsClient(api_key="valid-secret-key"))
        result = api_key_authorizer(authorizer_event({"x-api-key": "wrong-key"}), provider=provider)
        assert result["principalId"] == "unauthorized"
        assert effect(result) == "Deny"

    def test_denies_missing_key_without_fetching(self):
        fake = FakeSecretsClient()
        result = api_key_authorizer(authorizer_event(), provider=make_provider(fake))
        assert effect(result) == "Deny"
        assert fake.calls == []

    def test_null_headers_deny(self):
        event = authorizer_event()
        event["headers"] = None
        result = api_key_authorizer(event, provider=make_provider(FakeSecretsClient()))
        assert effect(result) == "Deny"

    @pytest.mark.parametrize("header", ["X-API-Key", "X-Api-Key", "x-api-key", "X-API-KEY"])
    def test_header_lookup_is_case_insensitive(self, header):
        provider = make_provider(FakeSecretsClient(api_key="valid-secret-key"))
        result = api_key_authorizer(authorizer_event({header: "valid-secret-key"}), provider=provider)
        assert effect(result) == "Allow"

    def test_denies_when_secret_store_fails(self):
        provider = make_provider(FakeSecretsClient(error=client_error()))
        result = api_key_authorizer(authorizer_event({"x-api-key": "any-key"}), provider=provider)
        assert effect(result) == "Deny"

    def test_denies_when_secret_name_not_set(self):
        fake = FakeSecretsClient()
        result = api_key_authorizer(
            authorizer_event({"x-api-key": "any-key"}), provider=make_provider(fake, secret_name=None)
        )
        assert effect(result) == "Deny"
        assert fake.calls == []

    def test_unexpected_error_fails_closed(self):
        class ExplodingProvider:
            def get_secret(self):
                raise RuntimeError("boom")

        result = api_key_authorizer(authorizer_event({"x-api-key": "any-key"}), provider=ExplodingProvider())
        assert effect(result) == "Deny"

    def test_consecutive_checks_share_cache(self):
        fake = FakeSecretsClient(api_key="valid-secret-key")
        provider = make_provider(fake)
        for _ in range(3):
            api_key_authorizer(authorizer_event({"x-api-key": "valid-secret-key"}), provider=provider)
        assert len(fake.calls) == 1
