from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from fastapi import Depends, HTTPException, Request, status

from .credentials import ApiKeyProvider, get_secret_provider, is_authorized
from .settings import get_settings

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
ALLOW = "Allow"
DENY = "Deny"


@dataclass(frozen=True)
class AuthDecision:
    allowed: bool
    # True when the request carried no API key at all
    missing_key: bool = False


def find_header(headers: Optional[Mapping[str, Any]], name: str) -> Optional[str]:
    """Case-insensitive header lookup over a plain mapping."""
    if not headers:
        return None
    wanted = name.lower()
    for key, value in headers.items():
        if isinstance(key, str) and key.lower() == wanted and value is not None:
            return str(value)
    return None


# PUBLIC_INTERFACE
def check_api_key(presented: Optional[str], provider: ApiKeyProvider) -> AuthDecision:
    """
    Decide whether a presented API key grants access.

    Fails closed: no key, no expected key, a mismatch or any error denies.
    The secret is not fetched when no key was presented.
    """
    if not presented:
        logger.info("No API key provided")
        return AuthDecision(allowed=False, missing_key=True)
    try:
        expected = provider.get_secret()
    except Exception:
        logger.exception("API key lookup failed")
        return AuthDecision(allowed=False)
    if expected is None:
        logger.error("Could not retrieve expected API key")
        return AuthDecision(allowed=False)
    if not is_authorized(presented, expected):
        logger.info("API key validation failed")
        return AuthDecision(allowed=False)
    return AuthDecision(allowed=True)


# PUBLIC_INTERFACE
def build_policy(principal_id: str, effect: str, resource: Optional[str]) -> Dict[str, Any]:
    """Build an API Gateway authorizer response for a single execute-api resource."""
    return {
        "principalId": principal_id,
        "policyDocument": {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Action": "execute-api:Invoke",
                    "Effect": effect,
                    "Resource": resource,
                }
            ],
        },
    }


# PUBLIC_INTERFACE
def require_api_key(request: Request, provider: ApiKeyProvider = Depends(get_secret_provider)) -> None:
    """
    FastAPI dependency enforcing the x-api-key header when ENABLE_API_KEY_AUTH
    is enabled in settings. When disabled, the dependency is a no-op.

    Behavior when enabled:
    - missing header -> 401
    - wrong key, or the expected key cannot be fetched -> 403

    Usage:
        router = APIRouter(dependencies=[Depends(require_api_key)])
    """
    if not get_settings().enable_api_key_auth:
        return None

    decision = check_api_key(request.headers.get(API_KEY_HEADER), provider)
    if decision.allowed:
        return None
    if decision.missing_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid API key")
