from typing import Annotated, AsyncGenerator
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from core.config import AuthConfig
from core.database import SessionLocal
from core.exceptions import InvalidToken
from repositories.token_store import SqlAlchemyTokenStore
from repositories.user_store import SqlAlchemyUserStore
from repositories.records import UserRecord
from services.auth_service import AuthService
from services.token_service import TokenService

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session

db_dependency = Annotated[AsyncSession, Depends(get_db)]


def get_auth_config(request: Request) -> AuthConfig:
    return request.app.state.auth_config


def get_token_service(db: db_dependency, config: Annotated[AuthConfig, Depends(get_auth_config)]) -> TokenService:
    return TokenService(config, SqlAlchemyTokenStore(db), SqlAlchemyUserStore(db))

token_service_dependency = Annotated[TokenService, Depends(get_token_service)]


def get_auth_service(
    db: db_dependency,
    config: Annotated[AuthConfig, Depends(get_auth_config)],
    token_service: token_service_dependency,
) -> AuthService:
    return AuthService(config, SqlAlchemyUserStore(db), token_service)

auth_service_dependency = Annotated[AuthService, Depends(get_auth_service)]


def get_current_user(
    request: Request,
    token_service: token_service_dependency,
    bearer: Annotated[str | None, Depends(oauth2_scheme)],
) -> dict:
    """
    Resolve the caller from the Authorization header, or the access-token cookie.

    Returns the verified claims only; nothing is read from the database.
    """
    token = bearer or request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token:
        raise InvalidToken("no access token presented")

    payload = token_service.decode_access_token(token)
    return {"user_id": payload["sub"], "email": payload.get("email"), "role": payload.get("role")}

user_dependency = Annotated[dict, Depends(get_current_user)]


async def require_admin(user: user_dependency, auth_service: auth_service_dependency) -> UserRecord:
    return await auth_service.require_role(user["user_id"], "admin")

admin_dependency = Annotated[UserRecord, Depends(require_admin)]
