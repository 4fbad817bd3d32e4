from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime

from shopcart.db.base import Base


class CartStorageEntry(Base):
    """One key-value slot holding a serialized cart."""
    __tablename__ = "cart_storage"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


__all__ = [
    "CartStorageEntry",
    "Base"
]
