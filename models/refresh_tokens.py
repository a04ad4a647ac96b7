from core.database import Base
from sqlalchemy import Column, Boolean, DateTime, String, ForeignKey
from sqlalchemy.orm import relationship
from models.mixins import CreatedAtMixin, generate_uuid

class RefreshToken(Base, CreatedAtMixin):
    """
    One row per issued refresh token.

    Rows are only ever updated to flip `is_revoked` to True, either when the
    token is rotated or when the owner's sessions are revoked. Nothing here
    deletes them; cleanup of expired rows is left to an outside sweep.
    """
    __tablename__ = "refresh_tokens"

    #pk
    id = Column(String(36), primary_key=True, default=generate_uuid)

    #fk
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    user = relationship("User", back_populates="refresh_tokens")

    token = Column(String(1024), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    is_revoked = Column(Boolean, default=False, nullable=False)
