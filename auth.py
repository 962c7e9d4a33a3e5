"""
Cookie based JWT authentication.

``TokenService`` signs and verifies HS256 tokens carrying the caller's identity
claims. ``verify_token`` is the FastAPI dependency guarding user specific
routes: it reads the ``token`` cookie, verifies it and binds the decoded claims
to ``request.state.user``. Whether that identity may see a given resource is
decided by the route itself (see ``require_same_user``).
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, Request
from starlette.responses import Response

import config

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class TokenService:
    def __init__(self, secret: str, lifetime: timedelta = timedelta(hours=config.TOKEN_LIFETIME_HOURS)):
        if not secret:
            raise ValueError("A signing secret is required")
        self.secret = secret
        self.lifetime = lifetime

    def issue(self, claims: Dict[str, Any]) -> str:
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload.update({"iat": now, "exp": now + self.lifetime})
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)

    def verify(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        """Return the token's claims, or None when it is missing, malformed, tampered with or expired."""
        if not token:
            return None
        try:
            return jwt.decode(token, self.secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired token")
        except jwt.InvalidTokenError as e:
            logger.warning("Rejected invalid token: %s", e)
        return None


@lru_cache(maxsize=1)
def _default_token_service() -> TokenService:
    return TokenService(config.ACCESS_TOKEN_SECRET)


def get_token_service() -> TokenService:
    try:
        return _default_token_service()
    except ValueError:
        logger.error("ACCESS_TOKEN_SECRET is not configured")
        raise HTTPException(status_code=500, detail="Token signing is not configured")


def token_cookie(request: Request) -> str:
    token = request.cookies.get(config.TOKEN_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="unauthorized access")
    return token


# token_cookie must stay ahead of get_token_service: dependencies resolve in order
def verify_token(
    request: Request,
    token: str = Depends(token_cookie),
    tokens: TokenService = Depends(get_token_service),
) -> Dict[str, Any]:
    claims = tokens.verify(token)
    if claims is None:
        raise HTTPException(status_code=401, detail="unauthorized access")
    request.state.user = claims
    return claims


def require_same_user(claims: Dict[str, Any], email: Optional[str]) -> None:
    if not email or claims.get("email") != email:
        logger.warning("Forbidden: %s requested data of %s", claims.get("email"), email)
        raise HTTPException(status_code=403, detail="forbidden user")


# Cookie helpers

def cookie_options(production: bool = config.IS_PRODUCTION) -> Dict[str, Any]:
    return {
        "httponly": True,
        "secure": production,
        "samesite": "none" if production else "strict",
    }


def set_token_cookie(response: Response, token: str, lifetime: timedelta, production: bool = config.IS_PRODUCTION) -> None:
    response.set_cookie(
        config.TOKEN_COOKIE_NAME,
        token,
        max_age=int(lifetime.total_seconds()),
        **cookie_options(production),
    )


def clear_token_cookie(response: Response, production: bool = config.IS_PRODUCTION) -> None:
    response.delete_cookie(config.TOKEN_COOKIE_NAME, **cookie_options(production))
