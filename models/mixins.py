import uuid

from sqlalchemy.sql import func
from sqlalchemy import Column, DateTime


def generate_uuid() -> str:
    return str(uuid.uuid4())


class CreatedAtMixin:
    created_at = Column(DateTime(timezone=True), default=func.now(), nullable=False)
