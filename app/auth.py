# app/auth.py
import secrets
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from .errors import AppError, AuthenticationError, ConfigurationError
from .logger import get_logger

logger = get_logger("auth")

API_PREFIX = "/api"


def check_api_key(expected: Optional[str], presented: Optional[str]) -> None:
    """Raise unless ``presented`` exactly matches the configured key."""
    if not expected:
        logger.warning("API_KEY is not set; refusing request")
        raise ConfigurationError()
    if not presented or not secrets.compare_digest(presented.encode(), expected.encode()):
        raise AuthenticationError()


def is_guarded_path(path: str) -> bool:
    return path == API_PREFIX or path.startswith(API_PREFIX + "/")


async def api_key_middleware(request: Request, call_next):
    # runs before routing, so unknown /api paths and wrong methods are refused too
    if is_guarded_path(request.url.path):
        try:
            check_api_key(request.app.state.settings.api_key, request.headers.get("x-api-key"))
        except AppError as exc:
            return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
    return await call_next(request)
