"""Dependency injection for FastAPI endpoints"""

import logging
from typing import Optional

from fastapi import Depends, Header, Request

from oik_projection.config import settings
from oik_projection.domain.exceptions import AuthenticationError
from oik_projection.infrastructure.clients.advisory import AdvisoryClient
from oik_projection.infrastructure.clients.identity import IdentityClient, extract_bearer_token
from oik_projection.infrastructure.observability.metrics import identity_failures_counter


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_identity_client() -> IdentityClient:
    """Provide identity provider client instance"""
    return IdentityClient()


def get_advisory_client() -> Optional[AdvisoryClient]:
    """Provide advisory client, or None when no API key is configured"""
    if not settings.advisory_api_key:
        return None
    return AdvisoryClient()


async def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    identity_client: IdentityClient = Depends(get_identity_client),
) -> str:
    """
    Authenticate the caller from its bearer token.

    Resolved before the request body is validated, so an unauthenticated
    call is rejected with 401 whatever its payload.
    """
    try:
        token = extract_bearer_token(authorization)
        return await identity_client.get_user_id(token)
    except AuthenticationError as e:
        identity_failures_counter.inc()
        logging.warning(f"Authentication failed: {e}", extra={"request_id": get_request_id(request)})
        raise
