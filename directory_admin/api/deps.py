from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Annotated, Any

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from directory_admin.domain.permissions import has_permission
from directory_admin.infra.auth import decode_access_token

logger = logging.getLogger(__name__)

# Tokens come from the hosted auth provider; this service never issues them over HTTP.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


def get_current_claims(token: Annotated[str, Depends(oauth2_scheme)]) -> dict[str, Any]:
    try:
        return decode_access_token(token)
    except (jwt.PyJWTError, ValueError) as exc:
        logger.info("rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


Claims = Annotated[dict[str, Any], Depends(get_current_claims)]


def require_perm(permission: str) -> Callable[[dict[str, Any]], dict[str, Any]]:
    def _checker(claims: Claims) -> dict[str, Any]:
        if not has_permission(claims, permission):
            logger.warning("operator %s denied %s", claims.get("sub"), permission)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission: {permission}",
            )
        return claims

    return _checker
