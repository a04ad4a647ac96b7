from starlette.concurrency import run_in_threadpool

from core.config import AuthConfig
from core.exceptions import DuplicateEmail, Forbidden, InvalidCredentials, InvalidToken
from repositories.records import UserRecord
from repositories.user_store import UserStore
from services.token_service import TokenService
from utils.hashing import build_crypt_context, get_dummy_hash, get_password_hash, verify_password
from utils.logger import get_logger

logger = get_logger(__name__)

ROLES = ("customer", "admin")


class AuthService:
    """
    Registration and login on top of the token service.
    """

    def __init__(self, config: AuthConfig, user_store: UserStore, token_service: TokenService):
        self.config = config
        self.user_store = user_store
        self.token_service = token_service
        self.crypt_context = build_crypt_context(config.bcrypt_rounds)

    async def hash_password(self, password: str) -> str:
        # bcrypt is deliberately slow; keep it off the event loop
        return await run_in_threadpool(get_password_hash, password, self.crypt_context)

    async def check_password(self, password: str, hashed_password: str) -> bool:
        return await run_in_threadpool(verify_password, password, hashed_password, self.crypt_context)

    async def register(self, email: str, password: str, full_name: str, role: str = "customer") -> dict:
        """
        Creates a new user and signs them in.

        Flow:
        1. Check if email already exists
        2. Hash the password
        3. Create user
        4. Issue a token pair
        """
        if role not in ROLES:
            raise ValueError(f"unknown role {role!r}")

        existing_user = await self.user_store.find_by_email(email)
        if existing_user:
            logger.warning(
                "Registration attempt with existing email",
                extra={"user_id": existing_user.id}
            )
            raise DuplicateEmail()

        hashed_password = await self.hash_password(password)
        user = await self.user_store.create(
            email=email,
            hashed_password=hashed_password,
            full_name=full_name,
            role=role
        )

        tokens = await self.token_service.issue_tokens(user)

        logger.info("User registered", extra={"user_id": user.id, "role": user.role})

        return {**tokens, "user": user}

    async def authenticate_user(self, email: str, password: str) -> UserRecord | None:
        user = await self.user_store.find_by_email(email)

        if not user:
            dummy_hash = await run_in_threadpool(get_dummy_hash, self.config.bcrypt_rounds)
            await self.check_password(password, dummy_hash)
            logger.warning("Login failed", extra={"reason": "user_not_found"})
            return None

        if not await self.check_password(password, user.hashed_password):
            logger.warning("Login failed", extra={"reason": "invalid_password", "user_id": user.id})
            return None

        return user

    async def login(self, email: str, password: str) -> dict:
        user = await self.authenticate_user(email, password)
        if user is None:
            raise InvalidCredentials()

        tokens = await self.token_service.issue_tokens(user)

        logger.info("User logged in", extra={"user_id": user.id})

        return {**tokens, "user": user}

    async def issue_tokens_for_user(self, user_id: str) -> dict:
        """
        Issues a token pair for a user some upstream guard has already authenticated.
        """
        user = await self.user_store.find_by_id(user_id)
        if user is None:
            raise InvalidCredentials("user not found")

        tokens = await self.token_service.issue_tokens(user)
        return {**tokens, "user": user}

    async def get_user_by_id(self, user_id: str) -> UserRecord:
        user = await self.user_store.find_by_id(user_id)
        if user is None:
            raise InvalidToken("user not found")
        return user

    async def require_role(self, user_id: str, role: str) -> UserRecord:
        """
        Loads the user and checks their current role.

        The role claim in a token can be stale, so privileged operations go
        through here rather than reading it.
        """
        user = await self.user_store.find_by_id(user_id)
        if user is None or user.role != role:
            logger.warning("Role check failed", extra={"user_id": user_id, "required_role": role})
            raise Forbidden()
        return user
