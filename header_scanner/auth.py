# header_scanner/auth.py
import time
import logging
from typing import Dict, Optional, Protocol

import httpx

from .config import Settings

logger = logging.getLogger(__name__)


class AuthError(Exception):
    pass


class TokenProvider(Protocol):
    async def get_token(self) -> str: ...


class StaticTokenProvider:
    """Hands back a token obtained elsewhere (e.g. forwarded from the API caller)."""

    def __init__(self, token: str):
        if not token:
            raise AuthError("Empty bearer token")
        self.token = token

    async def get_token(self) -> str:
        return self.token


class ClientCredentialsTokenProvider:
    """OAuth2 client-credentials grant; the token is reused until shortly before it expires."""

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        scope: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        leeway_seconds: int = 30,
    ):
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.scope = scope
        self.client = client
        self.leeway_seconds = leeway_seconds
        self._token: Optional[str] = None
        self._expires_at = 0.0

    async def get_token(self) -> str:
        if self._token and time.monotonic() < self._expires_at:
            return self._token

        data = {"grant_type": "client_credentials"}
        if self.scope:
            data["scope"] = self.scope
        auth = (self.client_id, self.client_secret)

        try:
            if self.client is not None:
                r = await self.client.post(self.token_url, data=data, auth=auth)
            else:
                async with httpx.AsyncClient(timeout=10) as client:
                    r = await client.post(self.token_url, data=data, auth=auth)
            r.raise_for_status()
            payload = r.json()
            token = payload.get("access_token")
            expires_in = int(payload.get("expires_in", 300))
        except (httpx.HTTPError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Token request to %s failed: %s", self.token_url, e)
            raise AuthError(f"Could not obtain access token: {e}") from e

        if not token:
            raise AuthError("Token endpoint response has no access_token")
        self._token = token
        self._expires_at = time.monotonic() + max(0, expires_in - self.leeway_seconds)
        return token


def provider_from_settings(settings: Settings) -> Optional[ClientCredentialsTokenProvider]:
    if not settings.oidc_configured:
        return None
    return ClientCredentialsTokenProvider(
        settings.oidc_token_url,
        settings.oidc_client_id,
        settings.oidc_client_secret,
        scope=settings.oidc_scope,
    )


def bearer_from_header(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None


async def auth_headers(provider: Optional[TokenProvider]) -> Dict[str, str]:
    if provider is None:
        return {}
    token = await provider.get_token()
    return {"Authorization": f"Bearer {token}"}
