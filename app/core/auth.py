"""Supabase session resolution.

The access token is a Supabase Auth JWT. It arrives either as a bearer token
or inside the cookies written by the Supabase SSR helpers. Verification is
local (PyJWT); the only network I/O is the first JWKS fetch, which
PyJWKClient caches.
"""

import base64
import binascii
import json
import re
from collections.abc import Mapping
from typing import Any

import jwt
import structlog
from jwt import PyJWKClient

from app.core.config import settings
from app.core.constants import SessionCookies
from app.models.schemas import SessionUser

logger = structlog.get_logger(__name__)

_ASYMMETRIC_ALGORITHMS = ["ES256", "RS256"]

_AUTH_COOKIE_RE = re.compile(
    rf"^{re.escape(SessionCookies.AUTH_TOKEN_PREFIX)}(?P<ref>.+?)"
    rf"{re.escape(SessionCookies.AUTH_TOKEN_SUFFIX)}(?:\.(?P<chunk>\d+))?$"
)

# PyJWKClient.__init__ does no network I/O; keys are fetched and cached on first use.
_jwks_client: PyJWKClient | None = (
    PyJWKClient(settings.jwks_url, cache_keys=True) if settings.jwks_url else None
)


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _decode_session_cookie(raw: str) -> str | None:
    """Pull access_token out of a serialized Supabase session cookie."""
    if raw.startswith(SessionCookies.BASE64_PREFIX):
        encoded = raw.removeprefix(SessionCookies.BASE64_PREFIX)
        try:
            raw = base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4)).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            logger.debug("auth.cookie_undecodable")
            return None
    try:
        session = json.loads(raw)
    except json.JSONDecodeError:
        logger.debug("auth.cookie_not_json")
        return None

    # Older supabase-js releases stored [access_token, refresh_token, ...].
    if isinstance(session, list):
        token = session[0] if session else None
    elif isinstance(session, dict):
        token = session.get("access_token")
    else:
        token = None
    return token if isinstance(token, str) and token else None


def _cookie_token(cookies: Mapping[str, str]) -> str | None:
    whole: dict[str, str] = {}
    chunked: dict[str, dict[int, str]] = {}
    for name, value in cookies.items():
        match = _AUTH_COOKIE_RE.match(name)
        if not match:
            continue
        ref = match.group("ref")
        if match.group("chunk") is None:
            whole[ref] = value
        else:
            chunked.setdefault(ref, {})[int(match.group("chunk"))] = value

    for ref in sorted(set(whole) | set(chunked)):
        if ref in whole:
            raw = whole[ref]
        else:
            parts = chunked[ref]
            # chunks must run .0, .1, ... without gaps
            if sorted(parts) != list(range(len(parts))):
                logger.debug("auth.cookie_chunks_incomplete", ref=ref)
                continue
            raw = "".join(parts[i] for i in range(len(parts)))
        token = _decode_session_cookie(raw)
        if token:
            return token

    return cookies.get(SessionCookies.LEGACY_ACCESS_TOKEN) or None


def extract_access_token(authorization: str | None, cookies: Mapping[str, str]) -> str | None:
    """Return the session access token, preferring the Authorization header."""
    return _bearer_token(authorization) or _cookie_token(cookies)


def verify_access_token(token: str) -> dict[str, Any]:
    """
    Verify a Supabase access token and return its claims.

    HS256 tokens are checked against SUPABASE_JWT_SECRET; asymmetric tokens
    against the project JWKS. Without any verification material, local
    environments decode without a signature check so developers can run
    against a minimal JWT. Production never does.

    Raises jwt.InvalidTokenError (or a subclass) on any failure.
    """
    algorithm = jwt.get_unverified_header(token).get("alg")

    decode_kwargs: dict[str, Any] = {
        "audience": settings.SUPABASE_JWT_AUDIENCE,
        "options": {"verify_exp": True, "verify_aud": True, "require": ["exp", "sub"]},
    }
    if settings.SUPABASE_JWT_ISSUER:
        decode_kwargs["issuer"] = settings.SUPABASE_JWT_ISSUER

    if algorithm == "HS256" and settings.SUPABASE_JWT_SECRET:
        return jwt.decode(token, settings.SUPABASE_JWT_SECRET, algorithms=["HS256"], **decode_kwargs)

    if algorithm in _ASYMMETRIC_ALGORITHMS and _jwks_client:
        signing_key = _jwks_client.get_signing_key_from_jwt(token)
        return jwt.decode(token, signing_key.key, algorithms=_ASYMMETRIC_ALGORITHMS, **decode_kwargs)

    if settings.SUPABASE_JWT_SECRET or _jwks_client is not None:
        # keys are configured but none of them covers this token's algorithm
        raise jwt.InvalidTokenError(f"No verification key for algorithm {algorithm!r}")

    if settings.is_production:
        logger.error(
            "auth.verification_unavailable",
            algorithm=algorithm,
            hint="Set SUPABASE_JWT_SECRET or SUPABASE_URL / SUPABASE_JWKS_URL",
        )
        raise jwt.InvalidTokenError("No token verification key configured")

    logger.debug("auth.dev_mode_no_signature_check")
    decode_kwargs["options"]["verify_signature"] = False
    return jwt.decode(token, **decode_kwargs)


class SessionAuth:
    """Resolves the user behind one request's access token."""

    def __init__(self, access_token: str | None) -> None:
        self._access_token = access_token

    async def get_user(self) -> SessionUser | None:
        """Return the authenticated user, or None when there is no valid session."""
        if not self._access_token:
            logger.debug("auth.no_session")
            return None

        try:
            payload = verify_access_token(self._access_token)
        except jwt.ExpiredSignatureError:
            logger.info("auth.token_expired")
            return None
        except jwt.PyJWKClientError as e:
            logger.warning("auth.jwks_fetch_error", error=str(e))
            return None
        except jwt.InvalidTokenError as e:
            logger.info("auth.token_invalid", error=str(e))
            return None

        user_id = payload.get("sub")
        if not user_id:
            logger.info("auth.token_missing_sub")
            return None

        logger.debug("auth.user_authenticated", user_id=str(user_id)[:20])
        return SessionUser(
            id=str(user_id),
            email=payload.get("email"),
            role=payload.get("role"),
        )
