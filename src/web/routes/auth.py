"""GitHub OAuth sign-in, session and profile endpoints."""

import os
from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends

from github_api.models import GitHubUser
from web.auth import create_access_token, get_current_user
from web.deps import ClientFactory, get_client_factory, get_token_store, get_user_store
from web.errors import ConfigurationError, ResourceNotFoundError
from web.models import OAuthCallback, ok
from web.oauth import authorize_url, exchange_code_for_token, oauth_credentials
from web.store import EncryptedTokenStore, UserStore

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["auth"])

PROFILE_FIELDS = (
    "id",
    "github_id",
    "login",
    "name",
    "email",
    "avatar_url",
    "bio",
    "company",
    "location",
    "blog",
    "public_repos",
    "followers",
    "following",
)


def public_profile(user: dict) -> dict:
    return {key: user.get(key) for key in PROFILE_FIELDS}


async def upsert_user(users: UserStore, github_user: GitHubUser) -> dict:
    """Create or refresh the user keyed by GitHub id, keeping ``created_at``."""
    user_id = str(github_user.id)
    now = datetime.now(timezone.utc).isoformat()
    existing = await users.get(user_id)
    user = {
        **github_user.model_dump(),
        "id": user_id,
        "github_id": github_user.id,
        "created_at": existing["created_at"] if existing else now,
        "updated_at": now,
    }
    await users.set(user_id, user)
    return user


@router.post("/github/callback")
async def github_callback(
    body: OAuthCallback,
    users: UserStore = Depends(get_user_store),
    tokens: EncryptedTokenStore = Depends(get_token_store),
    factory: ClientFactory = Depends(get_client_factory),
):
    client_id, client_secret = oauth_credentials()
    access_token = await exchange_code_for_token(body.code, client_id, client_secret)

    async with factory(access_token) as client:
        github_user = await client.get_authenticated_user()

    user = await upsert_user(users, github_user)
    await tokens.set(user["id"], access_token)
    logger.info("auth.signed_in", user_id=user["id"], login=user["login"])

    return {
        "success": True,
        "token": create_access_token(user["id"], user["github_id"], user["login"]),
        "user": public_profile(user),
    }


@router.get("/me")
async def me(user: dict = Depends(get_current_user), users: UserStore = Depends(get_user_store)):
    stored = await users.get(user["id"])
    if stored is None:
        raise ResourceNotFoundError("User not found")
    return {"user": public_profile(stored)}


@router.post("/logout")
async def logout(
    user: dict = Depends(get_current_user),
    tokens: EncryptedTokenStore = Depends(get_token_store),
):
    await tokens.delete(user["id"])
    logger.info("auth.signed_out", user_id=user["id"])
    return ok(None, message="Logged out successfully")


@router.get("/github/url")
async def github_url():
    client_id = os.getenv("GH_CLIENT_ID")
    if not client_id:
        raise ConfigurationError("GitHub OAuth not configured")
    service_url = os.getenv("SERVICE_URL", "http://localhost:5173")
    return {"url": authorize_url(client_id, service_url), "client_id": client_id}
