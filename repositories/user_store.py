from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DuplicateEmail, StoreFailure
from models.users import User
from repositories.records import UserRecord
from utils.logger import get_logger

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.lower().strip()


class UserStore(Protocol):
    async def find_by_email(self, email: str) -> UserRecord | None: ...

    async def find_by_id(self, user_id: str) -> UserRecord | None: ...

    async def create(self, email: str, hashed_password: str, full_name: str, role: str = "customer") -> UserRecord: ...


class SqlAlchemyUserStore:
    """User lookups and creation backed by the `users` table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_email(self, email: str) -> UserRecord | None:
        return await self._first(select(User).where(User.email == normalize_email(email)), "find_by_email")

    async def find_by_id(self, user_id: str) -> UserRecord | None:
        return await self._first(select(User).where(User.id == user_id), "find_by_id")

    async def create(self, email: str, hashed_password: str, full_name: str, role: str = "customer") -> UserRecord:
        model = User(
            email=normalize_email(email),
            full_name=full_name,
            hashed_password=hashed_password,
            role=role,
        )
        try:
            self.session.add(model)
            await self.session.commit()
            await self.session.refresh(model)
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            await self.session.rollback()
            raise DuplicateEmail()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error(
                "User store write failed",
                extra={"operation": "create", "error_type": type(exc).__name__},
                exc_info=True
            )
            raise StoreFailure("user store create failed") from exc

        return UserRecord.from_model(model)

    async def _first(self, statement, operation: str) -> UserRecord | None:
        try:
            result = await self.session.execute(statement.execution_options(populate_existing=True))
            model = result.scalars().first()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error(
                "User store read failed",
                extra={"operation": operation, "error_type": type(exc).__name__},
                exc_info=True
            )
            raise StoreFailure(f"user store {operation} failed") from exc

        return UserRecord.from_model(model) if model else None
