from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException, status

from peoplehub.core.auth import extract_roles_from_token, validate_token
from peoplehub.core.config import settings
from peoplehub.models.auth import COMPANY_ADMIN, SUPER_ADMIN, UserInfo

logger = logging.getLogger(__name__)


async def get_current_user(authorization: str | None = Header(None)) -> UserInfo:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization.split(" ", 1)[1]

    try:
        payload = validate_token(
            token,
            settings.AUTH_ISSUER,
            settings.AUTH_AUDIENCE,
            settings.AUTH_JWKS_URL,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Token validation error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    roles = extract_roles_from_token(payload)
    return UserInfo(
        id=payload.get("sub"),
        name=payload.get("name"),
        email=payload.get("email"),
        roles=roles,
        company_id=payload.get("companyId"),
    )


def require_role(*roles: str):
    async def _check_role(user: UserInfo = Depends(get_current_user)) -> UserInfo:
        if not any(r in user.roles for r in roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {', '.join(roles)}",
            )
        return user

    return _check_role


require_admin = require_role(SUPER_ADMIN, COMPANY_ADMIN)
require_super_admin = require_role(SUPER_ADMIN)


def check_company_access(user: UserInfo, company_id: str) -> None:
    if not user.can_access_company(company_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this company",
        )


async def require_company_access(company_id: str, user: UserInfo = Depends(require_admin)) -> UserInfo:
    """For routes with a ``{company_id}`` path parameter."""
    check_company_access(user, company_id)
    return user
