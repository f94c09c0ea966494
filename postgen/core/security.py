import logging
from typing import Any, Optional

from jose import jwt, JWTError

from .config import settings

logger = logging.getLogger("postgen.security")


def decode_access_token(token: str) -> Optional[dict[str, Any]]:
    if not settings.auth_jwt_secret:
        return None
    options = {"verify_aud": bool(settings.auth_jwt_audience)}
    try:
        return jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_alg],
            audience=settings.auth_jwt_audience,
            options=options,
        )
    except JWTError as exc:
        logger.info(f"Rejected bearer token: {str(exc)}")
        return None


def user_id_from_token(token: Optional[str]) -> Optional[str]:
    if not token:
        return None
    payload = decode_access_token(token)
    if payload is None:
        return None
    uid = payload.get("sub")
    if not isinstance(uid, str) or not uid:
        return None
    return uid
