"""
Shared API key retrieval with a short-lived in-process cache.

The key lives in AWS Secrets Manager as a JSON document ``{"apiKey": "..."}``.
A successful fetch is reused for ``CACHE_TTL_SECONDS``; failures are never
cached so the next call retries the fetch.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .settings import get_settings

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 5 * 60
SECRET_FIELD = "apiKey"


@dataclass
class SecretCache:
    """A single cached secret value and the instant it stops being valid."""

    value: Optional[str] = None
    expires_at: float = 0.0

    def get(self, now: float) -> Optional[str]:
        if self.value and now < self.expires_at:
            return self.value
        return None

    def put(self, value: str, now: float, ttl: float) -> None:
        self.value = value
        self.expires_at = now + ttl

    def clear(self) -> None:
        self.value = None
        self.expires_at = 0.0


class ApiKeyProvider:
    """
    Fetch the expected API key, serving it from ``cache`` while fresh.

    Args:
        secret_name: Secrets Manager secret id; None disables fetching.
        client: boto3 Secrets Manager client (created lazily when omitted).
        cache: cache object, injectable so tests can inspect or reset it.
        ttl: seconds a fetched value stays valid.
        clock: monotonic seconds source.
        region_name: region for the lazily created client.
    """

    def __init__(
        self,
        secret_name: Optional[str],
        *,
        client: Any = None,
        cache: Optional[SecretCache] = None,
        ttl: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        region_name: Optional[str] = None,
    ) -> None:
        self._secret_name = secret_name
        self._client = client
        self._region_name = region_name
        self.cache = cache if cache is not None else SecretCache()
        self._ttl = ttl
        self._clock = clock

    def _secrets_client(self) -> Any:
        if self._client is None:
            self._client = boto3.client("secretsmanager", region_name=self._region_name)
        return self._client

    def get_secret(self) -> Optional[str]:
        """Return the API key, or None when it cannot be obtained."""
        cached = self.cache.get(self._clock())
        if cached is not None:
            return cached

        if not self._secret_name:
            logger.error("API_KEY_SECRET_NAME is not set; cannot fetch API key")
            return None

        logger.info("Fetching API key from Secrets Manager: %s", self._secret_name)
        try:
            result = self._secrets_client().get_secret_value(SecretId=self._secret_name)
        except (BotoCoreError, ClientError) as exc:
            logger.error("Error fetching API key from Secrets Manager: %s", exc)
            return None

        secret_string = result.get("SecretString")
        if not secret_string:
            logger.error("Secret %s has no SecretString", self._secret_name)
            return None

        try:
            secret_data = json.loads(secret_string)
        except ValueError:
            logger.error("Secret %s is not valid JSON", self._secret_name)
            return None

        api_key = secret_data.get(SECRET_FIELD) if isinstance(secret_data, dict) else None
        if not api_key or not isinstance(api_key, str):
            logger.error("Secret %s has no '%s' field", self._secret_name, SECRET_FIELD)
            return None

        self.cache.put(api_key, self._clock(), self._ttl)
        logger.info("API key retrieved and cached")
        return api_key


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_secret_provider() -> ApiKeyProvider:
    """Return the process-wide provider so its cache outlives single requests."""
    settings = get_settings()
    return ApiKeyProvider(settings.api_key_secret_name, region_name=settings.aws_region)


# PUBLIC_INTERFACE
def is_authorized(presented: Optional[str], expected: Optional[str]) -> bool:
    """True only when both keys are present and exactly equal."""
    if not presented or not expected:
        return False
    return presented == expected
