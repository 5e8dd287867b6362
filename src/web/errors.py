"""Application errors and their HTTP mapping.

Every fatal error leaves the service as
``{"success": false, "error": <code>, "message": <text>}``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from github_api import GitHubApiError, NotFoundError, RateLimitError
from recommend import RecommendationError

logger = structlog.get_logger()

RATE_LIMIT_MESSAGE = "GitHub API rate limit exceeded. Please try again later."


class AppError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(AppError):
    """Server-side setting (OAuth credentials, secrets) is missing."""

    status_code = 500
    code = "configuration_error"


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"


class NotAuthenticatedError(AppError):
    """Missing or invalid bearer token, or no stored GitHub token."""

    status_code = 401
    code = "not_authenticated"


class UpstreamApiError(AppError):
    status_code = 502
    code = "upstream_error"


class ResourceNotFoundError(AppError):
    status_code = 404
    code = "not_found"


def error_body(code: str, message: str) -> dict:
    return {"success": False, "error": code, "message": message}


def github_error_response(exc: GitHubApiError) -> JSONResponse:
    if isinstance(exc, RateLimitError):
        headers = {}
        if exc.reset_at is not None:
            headers["X-RateLimit-Reset"] = str(int(exc.reset_at.timestamp()))
        return JSONResponse(
            status_code=429, content=error_body("rate_limited", RATE_LIMIT_MESSAGE), headers=headers
        )
    if isinstance(exc, NotFoundError):
        return JSONResponse(status_code=404, content=error_body("not_found", exc.message))
    return JSONResponse(
        status_code=UpstreamApiError.status_code,
        content=error_body(UpstreamApiError.code, str(exc)),
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("web.app_error", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message))


async def github_error_handler(request: Request, exc: GitHubApiError) -> JSONResponse:
    logger.warning("web.github_error", path=request.url.path, status=exc.status, error=str(exc))
    return github_error_response(exc)


async def recommendation_error_handler(request: Request, exc: RecommendationError) -> JSONResponse:
    logger.error("web.recommendation_failed", path=request.url.path, error=str(exc))
    if exc.upstream is not None:
        return github_error_response(exc.upstream)
    return JSONResponse(
        status_code=UpstreamApiError.status_code,
        content=error_body(UpstreamApiError.code, str(exc)),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content=error_body(ValidationError.code, message))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(GitHubApiError, github_error_handler)
    app.add_exception_handler(RecommendationError, recommendation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
