from typing import Dict, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import RedirectResponse

from gym_portal.config import IS_PRODUCTION, LOGIN_PATH, SESSION_COOKIE_NAME, logger
from gym_portal.core.identity import (
    IdentityClient,
    IdentityProviderError,
    get_identity_client,
    safe_next,
)
from gym_portal.core.security import ValidationError, log_security_event
from gym_portal.schemas import CodeExchangeRequest, CodeExchangeResponse

router = APIRouter(prefix="/auth", tags=["Auth"])


def _with_params(path: str, params: Dict[str, str]) -> str:
    parts = urlsplit(path)
    query = parse_qsl(parts.query, keep_blank_values=True) + list(params.items())
    return urlunsplit(("", "", parts.path, urlencode(query), parts.fragment))


def _login_redirect(error: str, description: Optional[str] = None) -> RedirectResponse:
    params = {"error": error}
    if description:
        params["error_description"] = description
    return RedirectResponse(_with_params(LOGIN_PATH, params))


def _set_session_cookie(response: Response, session: Dict) -> None:
    response.set_cookie(
        SESSION_COOKIE_NAME,
        session["id_token"],
        max_age=session["expires_in"],
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="lax",
        path="/",
    )


@router.get("/callback")
async def auth_callback(
    code: Optional[str] = Query(None, max_length=2048),
    next_path: Optional[str] = Query(None, alias="next", max_length=2048),
    error: Optional[str] = Query(None, max_length=256),
    error_description: Optional[str] = Query(None, max_length=1024),
    client: IdentityClient = Depends(get_identity_client),
):
    """
    OAuth redirect target.

    Exchanges the authorization code for a session cookie and redirects to
    ``next``; every failure redirects to the login page with an error code.
    """
    if error:
        logger.warning("OAuth provider returned error: %s (%s)", error, error_description)
        return _login_redirect(error, error_description)

    if not code:
        logger.warning("No authorization code found in callback")
        return _login_redirect("missing_code", "No authorization code found")

    try:
        session = await client.exchange_code(code)
    except IdentityProviderError as e:
        log_security_event("code_exchange_failed", details={"reason": e.message})
        return _login_redirect("auth_error", e.message)
    except Exception:
        logger.exception("Unexpected error during auth callback")
        return _login_redirect(
            "unexpected_error",
            "An unexpected error occurred during authentication",
        )

    response = RedirectResponse(_with_params(safe_next(next_path), {"auth": "success"}))
    _set_session_cookie(response, session)
    return response


@router.post("/callback", response_model=CodeExchangeResponse)
async def exchange_code(
    payload: CodeExchangeRequest,
    response: Response,
    client: IdentityClient = Depends(get_identity_client),
) -> CodeExchangeResponse:
    """Programmatic code exchange for clients that cannot follow redirects."""
    if not payload.code:
        raise ValidationError("Authorization code is required", field="code")

    try:
        session = await client.exchange_code(payload.code)
    except IdentityProviderError as e:
        log_security_event("code_exchange_failed", details={"reason": e.message})
        raise ValidationError(e.message, field="code") from e

    _set_session_cookie(response, session)
    return CodeExchangeResponse(
        success=True,
        user=session["user"],
        redirect=safe_next(payload.next),
    )
