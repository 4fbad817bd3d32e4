"""
Key-value storage slots for persisted carts.

A slot holds the JSON text of one cart. Carts are read once when a
CartManager is loaded and overwritten after every successful mutation.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shopcart.db.models import CartStorageEntry
from shopcart.schemas.cart import Product

logger = logging.getLogger(__name__)

_cart_adapter = TypeAdapter(List[Product])


def dump_cart(cart: List[Product]) -> str:
    """Serialize a cart to the text stored in a slot."""
    return _cart_adapter.dump_json(cart).decode()


def load_cart(text: Optional[str]) -> List[Product]:
    """
    Deserialize a stored cart. An empty slot is an empty cart; so is a slot
    whose content cannot be parsed or that lists a product more than once.
    """
    if not text:
        return []
    try:
        cart = _cart_adapter.validate_json(text)
    except ValidationError as e:
        logger.warning(f"Discarding unreadable stored cart: {str(e)}")
        return []

    ids = [product.id for product in cart]
    if len(ids) != len(set(ids)):
        logger.warning(f"Discarding stored cart with duplicate product ids: {ids}")
        return []
    return cart


class CartStorage(ABC):
    """Async key-value slot interface."""

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        pass


class InMemoryStorage(CartStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class DatabaseStorage(CartStorage):
    """Slots stored as rows of the cart_storage table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_item(self, key: str) -> Optional[str]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(CartStorageEntry.value).where(CartStorageEntry.key == key)
            )
            return result.scalar_one_or_none()

    async def set_item(self, key: str, value: str) -> None:
        async with self.session_factory() as session:
            entry = await session.get(CartStorageEntry, key)
            if entry is None:
                session.add(CartStorageEntry(key=key, value=value))
            else:
                entry.value = value
            await session.commit()
        logger.debug(f"Stored cart slot {key}")
