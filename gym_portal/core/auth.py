"""
Authorization Gate

Two independent credential schemes resolve into a single ``Principal`` once
per request:

- ``AdminPrincipal``: the caller presented the shared admin key.
- ``MemberPrincipal``: the caller presented a valid member bearer token.

Route handlers declare the capability they need through the ``require_*``
dependencies; owner-restricted records are checked with ``ensure_owner``.
"""

from dataclasses import dataclass
from typing import Optional, Union

from fastapi import Depends, Request
from firebase_admin import auth as firebase_auth

from gym_portal.config import (
    ADMIN_API_KEY,
    ADMIN_API_KEY_HEADER,
    ALLOW_QUERY_API_KEY,
)
from gym_portal.core.firebase_client import verify_id_token
from gym_portal.core.security import constant_time_equals, hash_token, log_security_event


class AuthenticationError(Exception):
    """Missing or invalid credential (401)."""

    def __init__(self, message: str = "Authentication required"):
        self.message = message
        super().__init__(message)


class AuthorizationError(Exception):
    """Authenticated, but not allowed to touch this resource (403)."""

    def __init__(self, message: str = "Access denied"):
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class AdminPrincipal:
    """Caller holding the admin key."""
    kind: str = "admin"


@dataclass(frozen=True)
class MemberPrincipal:
    """Caller authenticated as a specific member."""
    member_id: str
    email: Optional[str] = None
    kind: str = "member"


Principal = Union[AdminPrincipal, MemberPrincipal]


# -----------------------------------------------------------------------------
# Credential extraction
# -----------------------------------------------------------------------------

def get_admin_key(request: Request) -> Optional[str]:
    """Admin key from the header, or from the legacy ``api_key`` query parameter."""
    key = request.headers.get(ADMIN_API_KEY_HEADER)
    if key:
        return key
    if ALLOW_QUERY_API_KEY:
        key = request.query_params.get("api_key")
        if key:
            log_security_event(
                "admin_key_in_query_string",
                request=request,
                details={"hint": f"send the key in the {ADMIN_API_KEY_HEADER} header"},
                level="info",
            )
            return key
    return None


def is_admin_key(candidate: Optional[str]) -> bool:
    return constant_time_equals(candidate, ADMIN_API_KEY)


def get_bearer_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization")
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None


def member_from_token(token: str) -> Optional[MemberPrincipal]:
    """
    Verify a bearer token and extract the member identity.

    The ``member_id`` (or legacy ``memberId``) custom claim wins over the
    token subject when present.
    Returns None for a rejected token (bad signature, expired, malformed).
    Provider outages and misconfiguration propagate as server errors.
    """
    try:
        decoded = verify_id_token(token)
    except (firebase_auth.InvalidIdTokenError, ValueError):
        # Expired and revoked tokens are InvalidIdTokenError subclasses
        return None
    member_id = decoded.get("member_id") or decoded.get("memberId") or decoded.get("uid")
    if not member_id:
        return None
    return MemberPrincipal(member_id=str(member_id), email=decoded.get("email"))


# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------

async def resolve_principal(request: Request) -> Optional[Principal]:
    """Resolve the caller once; admin credentials take precedence."""
    admin_key = get_admin_key(request)
    if admin_key is not None:
        if is_admin_key(admin_key):
            return AdminPrincipal()
        log_security_event("invalid_admin_key", request=request)

    token = get_bearer_token(request)
    if token is not None:
        member = member_from_token(token)
        if member is not None:
            return member
        log_security_event(
            "invalid_member_token",
            request=request,
            details={"fingerprint": hash_token(token)},
        )

    return None


async def require_admin(
    principal: Optional[Principal] = Depends(resolve_principal),
) -> AdminPrincipal:
    if not isinstance(principal, AdminPrincipal):
        raise AuthenticationError("Invalid or missing API key")
    return principal


async def require_member(
    principal: Optional[Principal] = Depends(resolve_principal),
) -> MemberPrincipal:
    if not isinstance(principal, MemberPrincipal):
        raise AuthenticationError("Invalid or missing authentication token")
    return principal


async def require_principal(
    principal: Optional[Principal] = Depends(resolve_principal),
) -> Principal:
    if principal is None:
        raise AuthenticationError("Invalid or missing credentials")
    return principal


def ensure_owner(principal: Principal, owner_member_id: Optional[str], resource: str = "transaction") -> None:
    """Allow admins, or the member that owns the resource."""
    if isinstance(principal, AdminPrincipal):
        return
    if owner_member_id and principal.member_id == owner_member_id:
        return
    log_security_event(
        "owner_check_failed",
        member_id=principal.member_id,
        details={"resource": resource},
    )
    raise AuthorizationError(f"Access denied. Admin access or {resource} ownership required")
