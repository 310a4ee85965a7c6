"""
Cookie-based session tokens.

A login sets an HS256-signed JWT in the ``auth-token`` cookie. The
middleware lets auth endpoints and the health check through and
requires a valid, unexpired token everywhere else.
"""
import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse

from .config import settings
from .logger import get_logger

logger = get_logger(__name__)

EXEMPT_PREFIXES = ("/api/auth/", "/health", "/docs", "/openapi.json", "/login")


def create_session_token(email: str, ttl: Optional[timedelta] = None) -> str:
    ttl = ttl or timedelta(hours=settings.SESSION_TTL_HOURS)
    payload = {
        "email": email,
        "authenticated": True,
        "exp": datetime.now(timezone.utc) + ttl,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_session_token(token: str) -> dict:
    """Decode a session token; raises jwt.InvalidTokenError when invalid or expired"""
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    if not payload.get("email"):
        raise jwt.InvalidTokenError("Token has no email claim")
    return payload


def check_credentials(email: str, password: str) -> bool:
    """Email must be on the allow-list and the password must match"""
    if not settings.MASTER_PASSWORD:
        return False
    allowed = {address.lower() for address in settings.ALLOWED_EMAILS}
    if email.strip().lower() not in allowed:
        return False
    return hmac.compare_digest(password.encode(), settings.MASTER_PASSWORD.encode())


def set_session_cookie(response, token: str) -> None:
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.SESSION_TTL_HOURS * 3600,
    )


def is_exempt(path: str) -> bool:
    return any(path.startswith(prefix) for prefix in EXEMPT_PREFIXES)


async def auth_middleware(request: Request, call_next):
    """Reject unauthenticated requests: 401 for API routes, redirect for pages"""
    path = request.url.path
    if not settings.AUTH_ENABLED or is_exempt(path):
        return await call_next(request)

    is_api = path.startswith(settings.API_V1_STR + "/")
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)

    if not token:
        if is_api:
            return JSONResponse({"detail": "Unauthorized - Please login"}, status_code=401)
        return RedirectResponse("/login", status_code=307)

    try:
        payload = verify_session_token(token)
    except jwt.InvalidTokenError as e:
        logger.info("Rejected session token on %s: %s", path, e)
        if is_api:
            response = JSONResponse({"detail": "Unauthorized - Please login"}, status_code=401)
        else:
            response = RedirectResponse("/login", status_code=307)
        response.delete_cookie(settings.AUTH_COOKIE_NAME)
        return response

    request.state.user_email = payload["email"]
    return await call_next(request)
