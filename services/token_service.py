import secrets
from datetime import datetime, timezone, timedelta
from jose import jwt, JWTError
from core.config import AuthConfig
from core.exceptions import InvalidToken, ExpiredToken
from repositories.records import UserRecord
from repositories.token_store import TokenStore
from repositories.user_store import UserStore
from utils.logger import get_logger

logger = get_logger(__name__)

ACCESS = "access"
REFRESH = "refresh"


class TokenService:
    """
    Handles all token operations: creation, validation, rotation, and revocation.

    Access and refresh tokens are signed with separate secrets so a leaked
    access secret cannot mint refresh tokens. Every refresh token handed out
    has a matching row in the token store by the time the caller sees it.
    """

    def __init__(self, config: AuthConfig, token_store: TokenStore, user_store: UserStore):
        self.config = config
        self.token_store = token_store
        self.user_store = user_store

    @staticmethod
    def build_payload(user: UserRecord) -> dict:
        payload = {"sub": user.id, "email": user.email}
        if user.role:
            payload["role"] = user.role
        return payload

    def create_access_token(self, user: UserRecord, expires_delta: timedelta = None) -> str:
        """
        Creates a signed access token.

        Args:
            user: Token subject
            expires_delta: Lifetime override (default: config.access_ttl)
        """
        if expires_delta is None:
            expires_delta = self.config.access_ttl

        payload = {
            **self.build_payload(user),
            "type": ACCESS,
            "exp": datetime.now(timezone.utc) + expires_delta
        }

        return jwt.encode(payload, self.config.access_secret, algorithm=self.config.algorithm)

    def create_refresh_token(self, user: UserRecord, expires_delta: timedelta = None):
        """
        Creates a signed refresh token.

        The random `jti` keeps two tokens minted for the same user in the same
        second from colliding.

        Returns:
            Tuple of (refresh_token_string, expires_at)
        """
        if expires_delta is None:
            expires_delta = self.config.refresh_ttl

        expire = datetime.now(timezone.utc) + expires_delta

        payload = {
            **self.build_payload(user),
            "jti": secrets.token_urlsafe(16),
            "type": REFRESH,
            "exp": expire
        }

        refresh_token = jwt.encode(payload, self.config.refresh_secret, algorithm=self.config.algorithm)

        return refresh_token, expire

    async def issue_tokens(self, user: UserRecord) -> dict:
        """
        Creates an access + refresh token pair and records the refresh token.

        Returns:
            Dictionary with access_token, refresh_token, and token_type
        """
        tokens, _ = await self._issue(user)
        return tokens

    async def _issue(self, user: UserRecord):
        access_token = self.create_access_token(user)
        refresh_token, expires_at = self.create_refresh_token(user)

        record = await self.token_store.create_record(refresh_token, user.id, expires_at)

        logger.debug("Token pair issued", extra={"user_id": user.id})

        tokens = {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "token_type": "bearer"
        }
        return tokens, record

    def decode_access_token(self, token: str) -> dict:
        return self._decode(token, self.config.access_secret, ACCESS)

    def decode_refresh_token(self, token: str) -> dict:
        return self._decode(token, self.config.refresh_secret, REFRESH)

    def _decode(self, token: str, secret: str, expected_type: str) -> dict:
        try:
            payload = jwt.decode(token, secret, algorithms=[self.config.algorithm])
        except JWTError as exc:
            raise InvalidToken(f"{expected_type} token failed verification") from exc

        if payload.get("type") != expected_type:
            raise InvalidToken(f"expected {expected_type} token, got {payload.get('type')!r}")

        if not payload.get("sub"):
            raise InvalidToken("token has no subject")

        return payload

    async def rotate(self, refresh_token: str) -> dict:
        """
        Redeems a refresh token for a new pair, revoking the one presented.

        The new pair is issued before the old record is revoked so that a
        failed write leaves the client with a token that still works.

        Raises:
            InvalidToken: bad signature or claims, unknown or already used
                token, deleted user, or a concurrent rotation won
            ExpiredToken: the stored record is past its expiry (the record is
                revoked on the way out)
        """
        try:
            payload = self.decode_refresh_token(refresh_token)
        except InvalidToken:
            logger.warning("Refresh rejected", extra={"reason": "verification_failed"})
            raise

        record = await self.token_store.find_active_by_token(refresh_token)
        if record is None:
            logger.warning(
                "Refresh rejected",
                extra={"reason": "not_found_or_revoked", "user_id": payload["sub"]}
            )
            raise InvalidToken("refresh token not found or revoked")

        if record.is_expired():
            await self.token_store.mark_revoked(record)
            logger.warning(
                "Refresh rejected",
                extra={"reason": "expired", "user_id": record.user_id, "token_id": record.id}
            )
            raise ExpiredToken("refresh token expired")

        user = await self.user_store.find_by_id(payload["sub"])
        if user is None:
            logger.warning(
                "Refresh rejected",
                extra={"reason": "user_not_found", "user_id": payload["sub"]}
            )
            raise InvalidToken("token subject no longer exists")

        tokens, new_record = await self._issue(user)

        if not await self.token_store.mark_revoked(record):
            # Someone else redeemed this token between our lookup and now
            await self.token_store.mark_revoked(new_record)
            logger.warning(
                "Refresh rejected",
                extra={"reason": "concurrent_rotation", "user_id": user.id, "token_id": record.id}
            )
            raise InvalidToken("refresh token already rotated")

        logger.info("Refresh token rotated", extra={"user_id": user.id, "token_id": record.id})

        return tokens

    async def revoke_token(self, refresh_token: str) -> None:
        """
        Revokes a single refresh token (logout of one session).

        Tokens that fail verification or are unknown are ignored.
        """
        try:
            self.decode_refresh_token(refresh_token)
        except InvalidToken:
            return

        record = await self.token_store.find_active_by_token(refresh_token)
        if record is not None:
            await self.token_store.mark_revoked(record)
            logger.info("Session revoked", extra={"user_id": record.user_id, "token_id": record.id})

    async def revoke_all(self, user_id: str) -> None:
        """
        Revokes all refresh tokens for a user (logout from all devices).
        """
        count = await self.token_store.revoke_all_for_user(user_id)
        logger.info("All sessions revoked", extra={"user_id": user_id, "revoked": count})
