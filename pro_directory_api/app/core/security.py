"""
Bearer-token authentication and role checks.

Tokens are compact JWTs signed with HMAC-SHA256 using
``settings.secret_key``.  Two roles exist:

* ``admin`` – platform operators; may act on any account.
* ``professional`` – carries an ``account_id`` claim and may only act on
  that account.

``settings.admin_static_token`` may be configured for service-to-service
calls (for example the billing worker); it authenticates as ``admin``.
"""

import base64
import hashlib
import hmac
import json
import time
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings

ROLE_ADMIN = "admin"
ROLE_PROFESSIONAL = "professional"


def _b64_url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def _sign(message: bytes) -> bytes:
    return hmac.new(settings.secret_key.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(claims: Dict[str, Any], expires_delta: Optional[int] = None) -> str:
    """Return a signed token for ``claims``.

    ``expires_delta`` is the lifetime in seconds; it defaults to
    ``settings.access_token_expire_minutes``.  An ``exp`` claim is added.
    """
    payload = dict(claims)
    payload["exp"] = int(time.time()) + (expires_delta or settings.access_token_expire_minutes * 60)
    header_b64 = _b64_url_encode(json.dumps({"alg": "HS256", "typ": "JWT"}, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    return f"{header_b64}.{payload_b64}.{_b64_url_encode(_sign(signing_input))}"


def create_account_token(account_id: int, expires_delta: Optional[int] = None) -> str:
    """Token for the owner of a professional account."""
    return create_access_token(
        {"sub": f"account:{account_id}", "role": ROLE_PROFESSIONAL, "account_id": account_id},
        expires_delta=expires_delta,
    )


def create_admin_token(subject: str = "admin", expires_delta: Optional[int] = None) -> str:
    return create_access_token({"sub": subject, "role": ROLE_ADMIN}, expires_delta=expires_delta)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify a token's signature and expiry; return its claims or ``None``."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    try:
        signature = _b64_url_decode(signature_b64)
        if not hmac.compare_digest(_sign(f"{header_b64}.{payload_b64}".encode("utf-8")), signature):
            return None
        claims = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
        if not isinstance(claims, dict) or int(claims.get("exp", 0)) < int(time.time()):
            return None
    except (TypeError, ValueError):
        # binascii.Error, UnicodeDecodeError and JSONDecodeError are ValueErrors
        return None
    return claims


bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict[str, Any]:
    """Dependency returning the claims of the authenticated caller.

    Raises 401 when the header is missing or the token is invalid or
    expired.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token = credentials.credentials
    if settings.admin_static_token and hmac.compare_digest(token, settings.admin_static_token):
        return {"sub": "static_admin", "role": ROLE_ADMIN}
    claims = decode_access_token(token)
    if not claims:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims


def require_roles(*roles: str) -> Callable[..., Dict[str, Any]]:
    """Dependency factory allowing only callers whose ``role`` is in ``roles``.

    Usage: ``Depends(require_roles("admin"))``.
    """

    def _role_dependency(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if current_user.get("role") not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user

    return _role_dependency


def ensure_account_access(current_user: Dict[str, Any], account_id: int) -> None:
    """Raise 403 unless the caller is an admin or owns ``account_id``."""
    if current_user.get("role") == ROLE_ADMIN:
        return
    if current_user.get("role") == ROLE_PROFESSIONAL and current_user.get("account_id") == account_id:
        return
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")


def actor_of(current_user: Dict[str, Any]) -> str:
    """Audit label for the caller."""
    return str(current_user.get("sub") or "unknown")
