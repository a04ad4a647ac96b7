from dataclasses import dataclass, field
from datetime import datetime, timezone


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; every stored timestamp is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class UserRecord:
    id: str
    email: str
    full_name: str
    role: str = "customer"
    hashed_password: str = field(default="", repr=False)

    @classmethod
    def from_model(cls, model) -> "UserRecord":
        return cls(
            id=model.id,
            email=model.email,
            full_name=model.full_name,
            role=model.role,
            hashed_password=model.hashed_password,
        )

    def public(self) -> dict:
        return {"id": self.id, "email": self.email, "full_name": self.full_name, "role": self.role}


@dataclass(frozen=True)
class RefreshTokenRecord:
    id: str
    token: str = field(repr=False)
    user_id: str
    expires_at: datetime
    is_revoked: bool = False

    @classmethod
    def from_model(cls, model) -> "RefreshTokenRecord":
        return cls(
            id=model.id,
            token=model.token,
            user_id=model.user_id,
            expires_at=as_utc(model.expires_at),
            is_revoked=model.is_revoked,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or datetime.now(timezone.utc))
