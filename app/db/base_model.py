from datetime import datetime
from sqlalchemy import Column, DateTime, Integer


class TimestampMixin:
    """createdAt / updatedAt bookkeeping shared by every table."""

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class BaseModel(TimestampMixin):
    """Base class for models whose primary key is assigned by the store."""

    # Primary key with autoincrement=True to match PostgreSQL SERIAL type
    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
