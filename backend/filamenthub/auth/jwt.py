"""JWT helpers and Flask decorators for Bearer auth.

The user identity is the token's ``sub`` claim.
"""
from __future__ import annotations

import functools
from typing import Any, Callable, Dict, Optional

import jwt
from flask import current_app, g, request

from ..errors import UnauthorizedError


def encode(payload: Dict[str, Any]) -> str:
    secret = current_app.config.get("JWT_SECRET", "change-me")
    alg = current_app.config.get("JWT_ALG", "HS256")
    return jwt.encode(payload, secret, algorithm=alg)


def decode(token: str) -> Dict[str, Any]:
    secret = current_app.config.get("JWT_SECRET", "change-me")
    alg = current_app.config.get("JWT_ALG", "HS256")
    return jwt.decode(token, secret, algorithms=[alg])


def _bearer_claims() -> Optional[Dict[str, Any]]:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    token = auth.split(" ", 1)[1]
    try:
        claims = decode(token)
    except jwt.PyJWTError as e:
        raise UnauthorizedError(str(e)) from e
    if not claims.get("sub"):
        raise UnauthorizedError("Token has no subject")
    return claims


def current_user_id() -> Optional[str]:
    """Identity of the caller, or None when the request is anonymous."""
    return g.get("user_id")


def require_bearer(fn: Callable[..., Any]) -> Callable[..., Any]:
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any):
        claims = _bearer_claims()
        if claims is None:
            raise UnauthorizedError("Missing Bearer token")
        g.jwt = claims
        g.user_id = str(claims["sub"])
        return fn(*args, **kwargs)
    return wrapper


def optional_bearer(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Like ``require_bearer`` but lets anonymous requests through."""
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any):
        claims = _bearer_claims()
        if claims is not None:
            g.jwt = claims
            g.user_id = str(claims["sub"])
        return fn(*args, **kwargs)
    return wrapper
