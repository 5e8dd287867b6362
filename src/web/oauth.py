"""GitHub OAuth code exchange."""

import os
from typing import Optional
from urllib.parse import urlencode

import httpx
import structlog

from cli.retry import http_retry
from web.errors import ConfigurationError, UpstreamApiError

logger = structlog.get_logger()

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
OAUTH_SCOPE = "user:email read:user"


def oauth_credentials() -> tuple[str, str]:
    client_id = os.getenv("GH_CLIENT_ID")
    client_secret = os.getenv("GH_CLIENT_SECRET")
    if not client_id or not client_secret:
        raise ConfigurationError("GitHub OAuth credentials not configured")
    return client_id, client_secret


def authorize_url(client_id: str, service_url: str) -> str:
    query = urlencode(
        {
            "client_id": client_id,
            "redirect_uri": f"{service_url.rstrip('/')}/auth/github/callback",
            "scope": OAUTH_SCOPE,
        }
    )
    return f"{GITHUB_AUTHORIZE_URL}?{query}"


@http_retry()
async def _post_token_request(http: httpx.AsyncClient, payload: dict) -> httpx.Response:
    return await http.post(GITHUB_TOKEN_URL, json=payload, headers={"Accept": "application/json"})


async def exchange_code_for_token(
    code: str,
    client_id: str,
    client_secret: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Trade an authorization code for a user access token."""
    payload = {"client_id": client_id, "client_secret": client_secret, "code": code}
    async with httpx.AsyncClient(timeout=30.0, transport=transport) as http:
        try:
            response = await _post_token_request(http, payload)
        except httpx.TransportError as e:
            logger.error("oauth.exchange_transport_failed", error=str(e))
            raise UpstreamApiError("Failed to exchange code for access token") from e

    if response.is_error:
        logger.error("oauth.exchange_failed", status=response.status_code)
        raise UpstreamApiError("Failed to exchange code for access token")

    data = response.json()
    if data.get("error"):
        logger.warning("oauth.exchange_rejected", error=data["error"])
        raise UpstreamApiError(f"GitHub OAuth error: {data['error']}")
    token = data.get("access_token")
    if not token:
        raise UpstreamApiError("No access token received from GitHub")
    return token
