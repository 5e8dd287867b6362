"""FastAPI application entry point."""

import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cli.logging_config import setup_logging
from web.errors import register_exception_handlers
from web.routes import auth, contributions, github, recommendations, skills

setup_logging(
    json_mode=os.getenv("LOG_JSON", "").lower() in ("1", "true", "yes"),
    level=os.getenv("LOG_LEVEL", "INFO"),
)

logger = structlog.get_logger()


def _allowed_origins() -> list[str]:
    raw = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    missing = [name for name in ("JWT_SECRET", "SECRET_KEY") if not os.getenv(name)]
    if missing:
        logger.warning("web.missing_secrets", missing=missing)
    if not os.getenv("GITHUB_TOKEN"):
        logger.warning("web.no_github_token", detail="unauthenticated search rate limits apply")
    logger.info("web.startup")
    yield
    logger.info("web.shutdown")


app = FastAPI(
    title="ContriBuddy",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Mount routes
app.include_router(auth.router)
app.include_router(recommendations.router)
app.include_router(skills.router)
app.include_router(contributions.router)
app.include_router(github.router)


@app.get("/health")
async def health():
    return {"status": "ok", "service": "contribuddy"}
