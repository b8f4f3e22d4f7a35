"""Bearer JWT validation against the identity provider's JWKS."""

from __future__ import annotations

import json
import logging
import time
import urllib.error
import urllib.request
from typing import Any

from fastapi import HTTPException, status
from jose import jwk, jwt
from jose.constants import Algorithms
from jose.exceptions import ExpiredSignatureError, JWSSignatureError, JWTClaimsError, JWTError

logger = logging.getLogger("peoplehub.auth")

_JWKS_TTL_SECONDS = 24 * 60 * 60

_cache: dict[str, Any] = {
    "jwks": {},
    "jwks_timestamp": {},
}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_jwks(jwks_url: str) -> dict[str, Any]:
    now = time.time()

    if (
        jwks_url in _cache["jwks"]
        and jwks_url in _cache["jwks_timestamp"]
        and now - _cache["jwks_timestamp"][jwks_url] < _JWKS_TTL_SECONDS
    ):
        return _cache["jwks"][jwks_url]

    logger.info("Fetching JWKS from %s", jwks_url)

    try:
        req = urllib.request.Request(jwks_url)  # noqa: S310
        with urllib.request.urlopen(req, timeout=15) as resp:  # noqa: S310
            jwks = json.loads(resp.read().decode())

        _cache["jwks"][jwks_url] = jwks
        _cache["jwks_timestamp"][jwks_url] = now
        return jwks
    except (urllib.error.URLError, urllib.error.HTTPError) as e:
        logger.error("Failed to fetch JWKS: %s", e)
        if jwks_url in _cache["jwks"]:
            logger.warning("Using expired JWKS from cache for %s", jwks_url)
            return _cache["jwks"][jwks_url]
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Could not fetch JWKS: {e}",
        ) from e


def get_signing_key(token: str, jwks_url: str) -> dict[str, str]:
    try:
        header = jwt.get_unverified_header(token)
    except JWTError as e:
        raise _unauthorized(f"Invalid token header: {e}") from e

    kid = header.get("kid")
    if not kid:
        raise _unauthorized("Token has no 'kid' in header")

    jwks = get_jwks(jwks_url)
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return key

    raise _unauthorized(f"No matching signing key for kid: {kid}")


def validate_token(token: str, issuer: str, audience: str, jwks_url: str) -> dict[str, Any]:
    if not issuer or not audience or not jwks_url:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Missing authentication configuration",
        )

    signing_key_dict = get_signing_key(token, jwks_url)
    algorithm = signing_key_dict.get("alg", Algorithms.RS256)
    public_key = jwk.construct(signing_key_dict, algorithm=algorithm)

    options = {
        "verify_signature": True,
        "verify_aud": True,
        "verify_iss": True,
        "verify_exp": True,
        "require": ["exp", "iss", "aud", "sub"],
    }

    try:
        return jwt.decode(
            token,
            public_key,
            algorithms=[algorithm],
            audience=audience,
            issuer=issuer,
            options=options,
        )
    except ExpiredSignatureError as e:
        raise _unauthorized("Token is expired") from e
    except JWSSignatureError as e:
        raise _unauthorized("Invalid token signature") from e
    except JWTClaimsError as e:
        message = str(e).lower()
        if "audience" in message:
            raise _unauthorized("Invalid token audience") from e
        if "issuer" in message:
            raise _unauthorized("Invalid token issuer") from e
        raise _unauthorized("Invalid authentication credentials") from e
    except JWTError as e:
        raise _unauthorized("Invalid authentication credentials") from e


def extract_roles_from_token(payload: dict[str, Any]) -> list[str]:
    roles = payload.get("roles", [])
    if not isinstance(roles, list):
        return []
    return [str(r) for r in roles if isinstance(r, str | int)]
