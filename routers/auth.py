from fastapi import APIRouter, Request, Response
from starlette import status
from schemas.auth_schemas import (AuthResponse, CreateUserRequest, LoginRequest, MessageResponse,
RefreshTokenRequest, RevokeTokenRequest, Token, UserResponse)
from core.config import settings
from core.exceptions import InvalidToken
from middleware.rate_limiter import limiter
from utils.deps import (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, admin_dependency,
auth_service_dependency, token_service_dependency, user_dependency)
from utils.logger import get_logger

# Setup logger
logger = get_logger(__name__)


router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


def set_token_cookies(response: Response, tokens: dict, request: Request):
    """Mirror the pair into httpOnly cookies for browser clients."""
    config = request.app.state.auth_config
    secure = settings.ENV == "production"

    response.set_cookie(
        REFRESH_TOKEN_COOKIE, tokens["refresh_token"],
        max_age=int(config.refresh_ttl.total_seconds()),
        httponly=True, secure=secure, samesite="strict"
    )
    response.set_cookie(
        ACCESS_TOKEN_COOKIE, tokens["access_token"],
        max_age=int(config.access_ttl.total_seconds()),
        httponly=True, secure=secure, samesite="strict"
    )


def presented_refresh_token(request: Request, body: RefreshTokenRequest | None) -> str:
    """The refresh token from the JSON body, else from the httpOnly cookie."""
    token = body.refresh_token if body else request.cookies.get(REFRESH_TOKEN_COOKIE)
    if not token:
        raise InvalidToken("no refresh token presented")
    return token


def clear_token_cookies(response: Response):
    secure = settings.ENV == "production"
    response.delete_cookie(REFRESH_TOKEN_COOKIE, httponly=True, secure=secure, samesite="strict")
    response.delete_cookie(ACCESS_TOKEN_COOKIE, httponly=True, secure=secure, samesite="strict")


def to_auth_response(result: dict) -> AuthResponse:
    return AuthResponse(
        access_token=result["access_token"],
        refresh_token=result["refresh_token"],
        token_type=result["token_type"],
        user=UserResponse(**result["user"].public())
    )


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("3/minute")
async def signup(request: Request, response: Response, body: CreateUserRequest, auth_service: auth_service_dependency):
    result = await auth_service.register(body.email, body.password, body.full_name)
    set_token_cookies(response, result, request)
    return to_auth_response(result)


@router.post("/login", response_model=AuthResponse)
@limiter.limit("5/minute")
async def login(request: Request, response: Response, body: LoginRequest, auth_service: auth_service_dependency):
    result = await auth_service.login(body.email, body.password)
    set_token_cookies(response, result, request)
    return to_auth_response(result)


@router.post("/refresh", response_model=Token)
@limiter.limit("10/minute")
async def refresh_token(request: Request, response: Response, token_service: token_service_dependency, body: RefreshTokenRequest | None = None):
    """
    Get a new token pair using a refresh token, sent in the body or as the
    refresh_token cookie. The presented token is spent.
    """
    tokens = await token_service.rotate(presented_refresh_token(request, body))
    set_token_cookies(response, tokens, request)
    return tokens


@router.post("/logout", response_model=MessageResponse)
@limiter.limit("10/minute")
async def logout(request: Request, response: Response, user: user_dependency, token_service: token_service_dependency):
    """
    Revoke every refresh token of the caller (logout from all devices).
    """
    await token_service.revoke_all(user["user_id"])
    clear_token_cookies(response)
    return {"message": "Logged out successfully"}


@router.post("/logout/session", response_model=MessageResponse)
@limiter.limit("10/minute")
async def logout_session(request: Request, response: Response, token_service: token_service_dependency, body: RevokeTokenRequest | None = None):
    """
    Revoke a single refresh token, from the body or the refresh_token cookie.
    Unknown or invalid tokens still return 200.
    """
    await token_service.revoke_token(presented_refresh_token(request, body))
    clear_token_cookies(response)
    return {"message": "Logged out successfully"}


@router.get("/me")
@limiter.limit("30/minute")
async def me(request: Request, user: user_dependency):
    """
    Claims of the presented access token, without a database round trip.
    """
    return {"message": "You are authenticated!", "user": user}


@router.get("/profile", response_model=UserResponse)
@limiter.limit("30/minute")
async def profile(request: Request, user: user_dependency, auth_service: auth_service_dependency):
    model = await auth_service.get_user_by_id(user["user_id"])
    return model.public()


@router.post("/users/{user_id}/revoke-sessions", response_model=MessageResponse)
@limiter.limit("10/minute")
async def revoke_user_sessions(request: Request, user_id: str, admin: admin_dependency, token_service: token_service_dependency):
    """
    Force sign-out of another user (admin only).
    """
    await token_service.revoke_all(user_id)

    logger.info(
        "Sessions revoked by admin",
        extra={"admin_id": admin.id, "user_id": user_id}
    )

    return {"message": "Sessions revoked"}
