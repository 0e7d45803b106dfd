"""
Identity provider client.

Exchanges an OAuth authorization code for tokens at the provider's token
endpoint and verifies the returned ID token, which then serves as the
member's session credential.
"""

from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import httpx
from firebase_admin import auth as firebase_auth

from gym_portal.config import (
    DEFAULT_REDIRECT_PATH,
    OAUTH_CLIENT_ID,
    OAUTH_CLIENT_SECRET,
    OAUTH_REDIRECT_URI,
    OAUTH_TIMEOUT_SECONDS,
    OAUTH_TOKEN_URL,
    logger,
)
from gym_portal.core.firebase_client import verify_id_token

DEFAULT_SESSION_SECONDS = 3600


class IdentityProviderError(Exception):
    """The provider rejected the code exchange."""

    def __init__(self, message: str = "Authentication failed"):
        self.message = message
        super().__init__(message)


def safe_next(next_path: Optional[str]) -> str:
    """
    Post-login redirect target.

    Only same-site relative paths are honoured; anything else (absolute URLs,
    protocol-relative ``//host`` paths) falls back to the default.
    """
    if not next_path:
        return DEFAULT_REDIRECT_PATH
    candidate = next_path.strip()
    parts = urlsplit(candidate)
    if (
        not candidate.startswith("/")
        or candidate.startswith("//")
        or "\\" in candidate
        or parts.scheme
        or parts.netloc
    ):
        return DEFAULT_REDIRECT_PATH
    return candidate


def _provider_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return f"Token endpoint returned {response.status_code}"
    if isinstance(payload, dict):
        return str(
            payload.get("error_description")
            or payload.get("error")
            or f"Token endpoint returned {response.status_code}"
        )
    return f"Token endpoint returned {response.status_code}"


class IdentityClient:
    """Authorization-code exchange against the configured token endpoint."""

    def __init__(
        self,
        token_url: str = OAUTH_TOKEN_URL,
        client_id: str = OAUTH_CLIENT_ID,
        client_secret: str = OAUTH_CLIENT_SECRET,
        redirect_uri: str = OAUTH_REDIRECT_URI,
        timeout: float = OAUTH_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout
        self.transport = transport

    async def exchange_code(self, code: str) -> Dict[str, Any]:
        """
        Exchange ``code`` for a verified session.

        Returns:
            Dict with ``id_token``, ``expires_in`` and the ``user`` claims

        Raises:
            IdentityProviderError: If the provider rejects the code or returns
                an unusable token
            RuntimeError: If the token endpoint is not configured
        """
        if not self.token_url:
            raise RuntimeError("OAUTH_TOKEN_URL is not configured")

        form = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        if self.redirect_uri:
            form["redirect_uri"] = self.redirect_uri

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.token_url,
                    data=form,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as e:
            logger.warning("Token endpoint unreachable: %s", e)
            raise IdentityProviderError("Identity provider unavailable") from e

        if response.status_code >= 400:
            message = _provider_message(response)
            logger.warning("Code exchange rejected (%d): %s", response.status_code, message)
            raise IdentityProviderError(message)

        try:
            tokens = response.json()
        except ValueError as e:
            raise IdentityProviderError("Invalid token response") from e

        id_token = tokens.get("id_token") if isinstance(tokens, dict) else None
        if not id_token:
            raise IdentityProviderError("Identity provider did not return an ID token")

        try:
            claims = verify_id_token(id_token)
        except (firebase_auth.InvalidIdTokenError, ValueError) as e:
            raise IdentityProviderError("Invalid ID token") from e

        user = {
            "id": claims.get("member_id") or claims.get("memberId") or claims.get("uid"),
            "email": claims.get("email"),
        }
        logger.info("Code exchange succeeded for %s", user["id"])
        return {
            "id_token": id_token,
            "expires_in": int(tokens.get("expires_in") or DEFAULT_SESSION_SECONDS),
            "user": user,
        }


def get_identity_client() -> IdentityClient:
    """FastAPI dependency returning a client built from configuration."""
    return IdentityClient()
