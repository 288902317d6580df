from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'dynamodb'
    - TODOS_TABLE_NAME: DynamoDB table holding todos. Default 'todos'
    - EXTERNAL_ID_INDEX_NAME: GSI keyed by externalRecordId. Default 'external-record-index'
    - STAGE: deployment stage echoed in responses. Default 'dev'
    - AWS_REGION: region used for boto3 clients. Default 'us-east-1'
    - API_KEY_SECRET_NAME: Secrets Manager secret containing {"apiKey": "..."}
    - ENABLE_API_KEY_AUTH: 'true' to require x-api-key on first-party routes (default: false)
    - AIRTABLE_API_KEY / AIRTABLE_BASE_ID / AIRTABLE_TABLE_ID: mirror target; all three required
    - AIRTABLE_TIMEOUT_SECONDS: HTTP timeout for Airtable calls. Default 10
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name. Default 'INFO'
    """

    persistence_backend: str
    todos_table_name: str
    external_id_index_name: str
    stage: str
    aws_region: str
    api_key_secret_name: Optional[str]
    enable_api_key_auth: bool
    airtable_api_key: Optional[str]
    airtable_base_id: Optional[str]
    airtable_table_id: Optional[str]
    airtable_timeout_s: float
    cors_allow_origins: List[str]
    log_level: str

    @property
    def airtable_configured(self) -> bool:
        return bool(self.airtable_api_key and self.airtable_base_id and self.airtable_table_id)


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _get_optional_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_float(value: str, default: float) -> float:
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "dynamodb"}:
        # Fallback to memory if unsupported
        backend = "memory"

    return Settings(
        persistence_backend=backend,
        todos_table_name=_get_env("TODOS_TABLE_NAME", "todos").strip(),
        external_id_index_name=_get_env("EXTERNAL_ID_INDEX_NAME", "external-record-index").strip(),
        stage=_get_env("STAGE", "dev").strip(),
        aws_region=_get_env("AWS_REGION", "us-east-1").strip(),
        api_key_secret_name=_get_optional_env("API_KEY_SECRET_NAME"),
        enable_api_key_auth=_parse_bool(_get_env("ENABLE_API_KEY_AUTH", "false"), False),
        airtable_api_key=_get_optional_env("AIRTABLE_API_KEY"),
        airtable_base_id=_get_optional_env("AIRTABLE_BASE_ID"),
        airtable_table_id=_get_optional_env("AIRTABLE_TABLE_ID"),
        airtable_timeout_s=_parse_float(_get_env("AIRTABLE_TIMEOUT_SECONDS", "10"), 10.0),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
