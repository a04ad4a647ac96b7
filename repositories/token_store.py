"""
Persistence for refresh-token records.

`mark_revoked` is a compare-and-set: the UPDATE only matches a row that is
still active, so when two requests redeem the same refresh token at once
exactly one of them sees its update land. Callers rely on the boolean result
rather than on any read they made earlier.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import StoreFailure
from models.refresh_tokens import RefreshToken
from repositories.records import RefreshTokenRecord
from utils.logger import get_logger, sanitize_log_data

logger = get_logger(__name__)


class TokenStore(Protocol):
    async def create_record(self, token: str, user_id: str, expires_at: datetime) -> RefreshTokenRecord: ...

    async def find_active_by_token(self, token: str) -> RefreshTokenRecord | None: ...

    async def find_by_token(self, token: str) -> RefreshTokenRecord | None: ...

    async def mark_revoked(self, record: RefreshTokenRecord) -> bool: ...

    async def revoke_all_for_user(self, user_id: str) -> int: ...


class SqlAlchemyTokenStore:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_record(self, token: str, user_id: str, expires_at: datetime) -> RefreshTokenRecord:
        model = RefreshToken(
            token=token,
            user_id=user_id,
            expires_at=expires_at,
            is_revoked=False
        )
        try:
            self.session.add(model)
            await self.session.commit()
            await self.session.refresh(model)
        except SQLAlchemyError as exc:
            await self._fail("create_record", exc, user_id=user_id, rollback=True)

        return RefreshTokenRecord.from_model(model)

    async def find_active_by_token(self, token: str) -> RefreshTokenRecord | None:
        statement = select(RefreshToken).where(
            RefreshToken.token == token,
            RefreshToken.is_revoked == False  # noqa: E712
        )
        return await self._first(statement, "find_active_by_token")

    async def find_by_token(self, token: str) -> RefreshTokenRecord | None:
        statement = select(RefreshToken).where(RefreshToken.token == token)
        return await self._first(statement, "find_by_token")

    async def mark_revoked(self, record: RefreshTokenRecord) -> bool:
        """
        Flip one record to revoked.

        Returns:
            True if this call revoked it, False if it was already revoked.
        """
        statement = (
            update(RefreshToken)
            .where(RefreshToken.id == record.id, RefreshToken.is_revoked == False)  # noqa: E712
            .values(is_revoked=True)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(statement)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self._fail("mark_revoked", exc, user_id=record.user_id, rollback=True)

        return result.rowcount == 1

    async def revoke_all_for_user(self, user_id: str) -> int:
        statement = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .values(is_revoked=True)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(statement)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self._fail("revoke_all_for_user", exc, user_id=user_id, rollback=True)

        return result.rowcount

    async def _first(self, statement, operation: str) -> RefreshTokenRecord | None:
        try:
            result = await self.session.execute(statement.execution_options(populate_existing=True))
            model = result.scalars().first()
        except SQLAlchemyError as exc:
            await self._fail(operation, exc, rollback=True)

        return RefreshTokenRecord.from_model(model) if model else None

    async def _fail(self, operation: str, exc: Exception, rollback: bool = False, **context):
        if rollback:
            await self.session.rollback()
        logger.error(
            "Token store operation failed",
            extra=sanitize_log_data({
                "operation": operation,
                "error_type": type(exc).__name__,
                **context
            }),
            exc_info=True
        )
        raise StoreFailure(f"token store {operation} failed") from exc
