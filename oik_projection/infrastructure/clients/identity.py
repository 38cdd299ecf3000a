"""Identity provider client for bearer token validation"""

from typing import Optional

import httpx

from oik_projection.config import settings
from oik_projection.domain.exceptions import AuthenticationError


class IdentityClient:
    """Resolves a bearer token to the authenticated user id"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.auth_api_base
        self.api_key = api_key if api_key is not None else settings.auth_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_user_id(self, token: str) -> str:
        """
        Validate `token` with the identity provider.

        Raises:
            AuthenticationError: On timeout, rejected token, or a body without a user id
        """
        if not token:
            raise AuthenticationError("No authorization header")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/auth/v1/user",
                    headers={"Authorization": f"Bearer {token}", "apikey": self.api_key},
                )
                response.raise_for_status()
                user_id = response.json()["id"]
            except httpx.TimeoutException as e:
                raise AuthenticationError(f"Identity provider timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise AuthenticationError("Invalid token") from e
            except httpx.HTTPError as e:
                raise AuthenticationError(f"Identity provider unavailable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise AuthenticationError(f"Invalid identity response: {e}") from e

        if not user_id:
            raise AuthenticationError("Invalid token")
        return str(user_id)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an Authorization header.

    Raises:
        AuthenticationError: Header missing or not a Bearer credential
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("No authorization header")
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise AuthenticationError("No authorization header")
    return token
