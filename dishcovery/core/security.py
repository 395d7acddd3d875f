"""Bearer token decoding. Tokens are issued and verified upstream by the auth service."""
from jose import JWTError, jwt

from dishcovery.core.config import settings


def decode_token(token: str) -> dict | None:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        return payload
    except JWTError:
        return None


def viewer_id_from_token(token: str | None) -> str | None:
    """Return the opaque viewer id carried by an access token, or None for anonymous."""
    if not token:
        return None
    payload = decode_token(token)
    if not payload or payload.get("type", "access") != "access":
        return None
    sub = payload.get("sub")
    return str(sub) if sub else None
