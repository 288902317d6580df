"""
AWS Lambda entry points that sit outside the FastAPI app.

``api_key_authorizer`` is an API Gateway REQUEST authorizer guarding the
first-party routes when the service is deployed behind API Gateway.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .auth import ALLOW, API_KEY_HEADER, DENY, build_policy, check_api_key, find_header
from .credentials import ApiKeyProvider, get_secret_provider

logger = logging.getLogger(__name__)

AUTHORIZED_PRINCIPAL = "authorized-user"
UNAUTHORIZED_PRINCIPAL = "unauthorized"


# PUBLIC_INTERFACE
def api_key_authorizer(
    event: Dict[str, Any],
    context: Any = None,
    provider: Optional[ApiKeyProvider] = None,
) -> Dict[str, Any]:
    """Return an Allow policy for a valid x-api-key, Deny for anything else."""
    method_arn = event.get("methodArn")
    logger.info("Authorizer invoked for %s", method_arn)

    try:
        presented = find_header(event.get("headers"), API_KEY_HEADER)
        decision = check_api_key(presented, provider or get_secret_provider())
    except Exception:
        logger.exception("Authorization failed")
        return build_policy(UNAUTHORIZED_PRINCIPAL, DENY, method_arn)

    if not decision.allowed:
        return build_policy(UNAUTHORIZED_PRINCIPAL, DENY, method_arn)

    logger.info("API key validation successful")
    return build_policy(AUTHORIZED_PRINCIPAL, ALLOW, method_arn)
