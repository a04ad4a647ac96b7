from core.database import Base
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from models.mixins import CreatedAtMixin, generate_uuid


class User(Base, CreatedAtMixin):
    __tablename__ = "users"

    #pk
    id = Column(String(36), primary_key=True, default=generate_uuid)

    #relationships
    refresh_tokens = relationship("RefreshToken", back_populates="user", passive_deletes=True)

    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), default="customer", nullable=False)
