"""
Base model class with common fields
"""

from sqlalchemy import Column, DateTime, String, func
import uuid

from pixstay.core.database import Base


def generate_id() -> str:
    return str(uuid.uuid4())


class BaseModel(Base):
    """
    Abstract base model with common fields
    """
    __abstract__ = True

    # Text ids: bookings are created by the hosted frontend and arrive as strings
    id = Column(
        String(64),
        primary_key=True,
        default=generate_id,
        nullable=False
    )
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )
