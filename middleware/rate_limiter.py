from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from jose import jwt, JWTError
from core.config import settings


def get_user_id(request: Request):
    """
    Rate-limit key: the access token's subject when one verifies, else the client IP.
    """
    token = request.headers.get("Authorization")
    config = getattr(request.app.state, "auth_config", None)
    if token and config:
        try:
            token = token.replace("Bearer ", "")
            payload = jwt.decode(token, config.access_secret, algorithms=[config.algorithm])
            user_id = payload.get("sub")
            if user_id and payload.get("type") == "access":
                return str(user_id)
        except JWTError:
            pass

    return get_remote_address(request)

limiter = Limiter(
    key_func=get_user_id,
    default_limits=["200/hour"],
    enabled=settings.RATE_LIMIT_ENABLED
)
