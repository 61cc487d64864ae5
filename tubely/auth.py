# tubely/auth.py
from __future__ import annotations
from typing import Mapping, Optional
from uuid import UUID
import hashlib
import logging

import jwt
from fastapi import Request, Security, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tubely.config import settings
from tubely.core.logging import set_request_context

logger = logging.getLogger("auth")

TOKEN_ISSUER = "tubely-access"
JWT_ALGORITHM = "HS256"

bearer_scheme = HTTPBearer(auto_error=False)  # expõe o esquema no OpenAPI


class MissingTokenError(Exception):
    pass


def _safe_token_id(token: str) -> str:
    # não loga o token; loga um identificador abreviado
    return hashlib.sha1(token.encode()).hexdigest()[:8]


def get_bearer_token(headers: Mapping[str, str]) -> str:
    header = headers.get("Authorization") or headers.get("authorization")
    if not header:
        raise MissingTokenError("no auth header included in request")
    scheme, _, token = header.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise MissingTokenError("malformed authorization header")
    return token


def validate_jwt(token: str, secret: str) -> UUID:
    """Valida assinatura, emissor e expiração; devolve o user id do claim `sub`."""
    claims = jwt.decode(
        token,
        secret,
        algorithms=[JWT_ALGORITHM],
        issuer=TOKEN_ISSUER,
        options={"require": ["exp", "sub", "iss"]},
    )
    try:
        return UUID(str(claims["sub"]))
    except ValueError as e:
        raise jwt.InvalidTokenError("subject is not a valid user id") from e


async def require_user(
    request: Request,
    _credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> UUID:
    """
    Dependency principal. Valida o Bearer e devolve o id do usuário autenticado.
    """
    try:
        token = get_bearer_token(request.headers)
    except MissingTokenError as e:
        logger.warning("Token ausente: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Couldn't find JWT")

    tid = _safe_token_id(token)
    try:
        user_id = validate_jwt(token, settings.jwt_secret)
    except jwt.InvalidTokenError as e:
        logger.warning("JWT inválido (token_id=%s): %s", tid, e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Couldn't validate JWT")

    set_request_context(user_id=str(user_id))
    logger.debug("Auth OK (token_id=%s)", tid)
    return user_id
