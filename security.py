import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Header, Request
from jose import JWTError, jwt
from passlib.context import CryptContext

from config import Settings
from errors import Forbidden

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def issue_token(subject_id: str, email: str, settings: Settings) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.token_expire_minutes)
    claims = {"sub": subject_id, "email": email, "exp": expire}
    return jwt.encode(claims, settings.token_secret, algorithm=settings.token_algorithm)


def verify_token(token: str, settings: Settings) -> Dict[str, Any]:
    try:
        claims = jwt.decode(token, settings.token_secret, algorithms=[settings.token_algorithm])
    except JWTError:
        raise Forbidden("Invalid or expired token")
    if not claims.get("sub"):
        raise Forbidden("Invalid token")
    return claims


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def route_guard(route_name: str) -> Callable[..., Optional[Dict[str, Any]]]:
    """Dependency for a route that may require a bearer credential.

    Whether ``route_name`` is protected is decided by
    ``settings.protected_routes``; unprotected routes pass with no claims.
    """

    def guard(
        authorization: Optional[str] = Header(default=None),
        settings: Settings = Depends(get_settings),
    ) -> Optional[Dict[str, Any]]:
        if route_name not in settings.protected_routes:
            return None
        if not authorization or not authorization.startswith("Bearer "):
            logger.warning("Missing bearer credential for %s", route_name)
            raise Forbidden("Not authenticated")
        return verify_token(authorization.split(" ", 1)[1], settings)

    return guard
