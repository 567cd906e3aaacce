"""Caller identification: JWT Bearer tokens or trusted gateway headers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import jwt as pyjwt
from fastapi import Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from skinscores.exceptions import UnauthenticatedError
from skinscores.models import Caller

if TYPE_CHECKING:
    from skinscores.core.config import AuthConfig

log = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)

DEFAULT_ROLE = "clinician"


async def require_caller(
    request: Request,
    bearer: HTTPAuthorizationCredentials | None = Security(_bearer_scheme),
) -> Caller:
    """Resolve the calling user or raise ``UnauthenticatedError``."""
    config: AuthConfig = request.app.state.settings.auth

    if not config.enabled:
        uid = request.headers.get(config.user_header, "").strip()
        if not uid:
            raise UnauthenticatedError("Authentication is required.")
        role = request.headers.get(config.role_header, "").strip() or DEFAULT_ROLE
        return Caller(uid=uid, role=role, admin_role=config.admin_role)

    if bearer is None:
        raise UnauthenticatedError("Authentication is required.")

    claims = _decode_jwt(bearer.credentials, config)
    uid = claims.get(config.uid_claim)
    if not uid:
        raise UnauthenticatedError(f"Token has no {config.uid_claim!r} claim.")
    role = claims.get(config.role_claim) or DEFAULT_ROLE
    return Caller(uid=str(uid), role=str(role), admin_role=config.admin_role)


def _decode_jwt(token: str, config: AuthConfig) -> dict[str, Any]:
    """Verify the token and return its claims."""
    options = {"verify_aud": bool(config.audience)}
    try:
        if config.jwks_url:
            # Full verification: fetch signing key from JWKS endpoint
            jwk_client = pyjwt.PyJWKClient(config.jwks_url)
            signing_key = jwk_client.get_signing_key_from_jwt(token)
            return pyjwt.decode(
                token,
                key=signing_key.key,
                algorithms=[config.algorithm],
                audience=config.audience or None,
                issuer=config.issuer or None,
                options=options,
            )
        if config.jwt_secret:
            return pyjwt.decode(
                token,
                key=config.jwt_secret,
                algorithms=[config.algorithm],
                audience=config.audience or None,
                issuer=config.issuer or None,
                options=options,
            )
        # Gateway-terminated auth: upstream proxy verified the signature,
        # we only decode claims (audience, issuer, expiry still checked).
        log.warning(
            "JWT signature verification disabled (no JWKS URL or secret). "
            "Ensure requests are proxied through an authenticating gateway."
        )
        return pyjwt.decode(
            token,
            options={**options, "verify_signature": False, "verify_exp": True},
            algorithms=[config.algorithm],
            audience=config.audience or None,
            issuer=config.issuer or None,
        )
    except pyjwt.PyJWTError as e:
        raise UnauthenticatedError(f"Invalid token: {e}") from e
