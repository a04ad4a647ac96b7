"""
Store interfaces the auth services depend on, with their SQLAlchemy implementations.
"""

from repositories.records import UserRecord, RefreshTokenRecord
from repositories.user_store import UserStore, SqlAlchemyUserStore
from repositories.token_store import TokenStore, SqlAlchemyTokenStore

__all__ = [
    "UserRecord",
    "RefreshTokenRecord",
    "UserStore",
    "SqlAlchemyUserStore",
    "TokenStore",
    "SqlAlchemyTokenStore",
]
