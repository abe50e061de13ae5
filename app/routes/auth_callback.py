"""
OAuth callback - finish the Supabase login and route the user by account type
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from app.config import Settings, get_settings
from app.errors import CareerServiceError
from app.services.identity_client import (
    EMPLOYER_USER_TYPE,
    SupabaseIdentityClient,
    code_verifier_cookie_name,
    decode_code_verifier,
)
from app.utils.logger import logger

router = APIRouter()

DEFAULT_NEXT = "/dashboard"
EMPLOYER_DASHBOARD = "/employer/dashboard"
AUTH_ERROR_PATH = "/auth/auth-code-error"


def get_identity_client(settings: Settings = Depends(get_settings)) -> SupabaseIdentityClient:
    return SupabaseIdentityClient(settings)


def safe_next_path(next_param: Optional[str]) -> str:
    """Only same-site absolute paths; anything else falls back to the dashboard"""
    if next_param and next_param.startswith("/") and not next_param.startswith("//") and "\\" not in next_param:
        return next_param
    return DEFAULT_NEXT


def redirect_base(request: Request, settings: Settings) -> str:
    origin = str(request.base_url).rstrip("/")
    if settings.is_local_env:
        # No load balancer in front locally, so X-Forwarded-Host is not trusted
        return origin
    forwarded_host = request.headers.get("x-forwarded-host")
    if forwarded_host:
        return f"https://{forwarded_host}"
    return origin


@router.get("/callback")
async def auth_callback(
    request: Request,
    code: Optional[str] = None,
    employer: Optional[str] = None,
    next: Optional[str] = None,
    settings: Settings = Depends(get_settings),
    identity: SupabaseIdentityClient = Depends(get_identity_client),
):
    origin = str(request.base_url).rstrip("/")
    error_redirect = RedirectResponse(f"{origin}{AUTH_ERROR_PATH}", status_code=307)

    if not code:
        return error_redirect

    is_employer_flow = employer == "true"
    destination = safe_next_path(next)

    try:
        verifier = decode_code_verifier(request.cookies.get(code_verifier_cookie_name(settings.supabase_url)))
        session = await identity.exchange_code_for_session(code, verifier)
    except CareerServiceError as e:
        logger.warning(f"[Auth] OAuth code exchange failed: {e.detail or e.message}")
        return error_redirect

    # Profile lookups are best-effort: the session is already established
    user_type = None
    try:
        user_type = await identity.get_user_type(session)
    except CareerServiceError as e:
        logger.warning(f"[Auth] Could not read user_type: {e.detail}")

    if is_employer_flow or user_type == EMPLOYER_USER_TYPE:
        if is_employer_flow and user_type != EMPLOYER_USER_TYPE:
            try:
                await identity.set_user_type(session, EMPLOYER_USER_TYPE)
            except CareerServiceError as e:
                logger.warning(f"[Auth] Could not upgrade user to employer: {e.detail}")
        destination = EMPLOYER_DASHBOARD

    return RedirectResponse(f"{redirect_base(request, settings)}{destination}", status_code=307)
