from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from ..auth import check_credentials, create_session_token, set_session_cookie
from ..config import settings
from ..logger import get_logger
from ..schemas import LoginRequest

logger = get_logger(__name__)

router = APIRouter()


@router.post("/login")
async def login(payload: LoginRequest):
    """Check email and password, then set the session cookie"""
    if not check_credentials(payload.email, payload.password):
        logger.info("Failed login for %s", payload.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    response = JSONResponse({"success": True})
    set_session_cookie(response, create_session_token(payload.email.strip().lower()))
    return response


@router.post("/logout")
async def logout():
    """Clear the session cookie"""
    response = JSONResponse({"success": True})
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return response
