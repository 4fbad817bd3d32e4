"""
Cart manager: the in-memory cart of one browser session, gated by live stock
and written through to its storage slot after every successful mutation.

Operations never raise for expected failures (stock query failure, unknown
product, out of stock, product not in cart). They resolve with a CartResult
whose outcome the caller turns into a user notification.
"""
import asyncio
import enum
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from shopcart.core.storefront_client import (
    StorefrontClient,
    StockQueryError,
    ProductLookupError,
)
from shopcart.schemas.cart import Product
from shopcart.services.storage import CartStorage, dump_cart, load_cart

logger = logging.getLogger(__name__)

CartListener = Callable[[List[Product]], None]


class CartOperation(str, enum.Enum):
    ADD = "ADD"
    REMOVE = "REMOVE"
    UPDATE_AMOUNT = "UPDATE_AMOUNT"


class CartOutcome(str, enum.Enum):
    SUCCESS = "SUCCESS"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    NOT_IN_CART = "NOT_IN_CART"
    STOCK_UNAVAILABLE = "STOCK_UNAVAILABLE"
    PRODUCT_UNAVAILABLE = "PRODUCT_UNAVAILABLE"
    IGNORED = "IGNORED"


@dataclass(frozen=True)
class CartResult:
    operation: CartOperation
    outcome: CartOutcome
    product_id: int
    cart: List[Product] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome in (CartOutcome.SUCCESS, CartOutcome.IGNORED)


def _find_index(cart: List[Product], product_id: int) -> int:
    return next((i for i, product in enumerate(cart) if product.id == product_id), -1)


class CartManager:
    def __init__(
        self,
        storage: CartStorage,
        client: StorefrontClient,
        key: str,
        cart: Optional[List[Product]] = None
    ):
        self.storage = storage
        self.client = client
        self.key = key
        self._cart: List[Product] = list(cart or [])
        self._lock = asyncio.Lock()
        self._listeners: List[CartListener] = []

    @classmethod
    async def load(cls, storage: CartStorage, client: StorefrontClient, key: str) -> "CartManager":
        """Create a manager from whatever its storage slot currently holds."""
        cart = load_cart(await storage.get_item(key))
        logger.info(f"Loaded cart {key} with {len(cart)} item(s)")
        return cls(storage, client, key, cart)

    @property
    def cart(self) -> List[Product]:
        return [product.model_copy() for product in self._cart]

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Call listener with the new cart after each committed mutation."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _commit(self, new_cart: List[Product]):
        # Storage first: memory only changes once the slot holds the same cart.
        await self.storage.set_item(self.key, dump_cart(new_cart))
        self._cart = new_cart
        for listener in list(self._listeners):
            try:
                listener(self.cart)
            except Exception:
                logger.exception(f"Cart listener failed for {self.key}")

    def _result(self, operation: CartOperation, outcome: CartOutcome, product_id: int) -> CartResult:
        return CartResult(operation=operation, outcome=outcome, product_id=product_id, cart=self.cart)

    async def add_product(self, product_id: int) -> CartResult:
        op = CartOperation.ADD
        async with self._lock:
            try:
                stock = await self.client.get_stock(product_id)
            except StockQueryError as e:
                logger.warning(f"Could not add product {product_id}: {str(e)}")
                return self._result(op, CartOutcome.STOCK_UNAVAILABLE, product_id)

            index = _find_index(self._cart, product_id)

            if index == -1:
                try:
                    product = await self.client.get_product(product_id)
                except ProductLookupError as e:
                    logger.warning(f"Could not add product {product_id}: {str(e)}")
                    return self._result(op, CartOutcome.PRODUCT_UNAVAILABLE, product_id)

                if stock.amount < 1:
                    logger.info(f"Product {product_id} is out of stock")
                    return self._result(op, CartOutcome.OUT_OF_STOCK, product_id)

                new_cart = self._cart + [product.model_copy(update={"amount": 1})]
            else:
                current = self._cart[index]
                if stock.amount < current.amount + 1:
                    logger.info(f"Product {product_id} out of stock: {stock.amount} available, {current.amount} in cart")
                    return self._result(op, CartOutcome.OUT_OF_STOCK, product_id)

                new_cart = list(self._cart)
                new_cart[index] = current.model_copy(update={"amount": current.amount + 1})

            await self._commit(new_cart)
            logger.info(f"Added to cart {self.key}: product_id={product_id}")
            return self._result(op, CartOutcome.SUCCESS, product_id)

    async def remove_product(self, product_id: int) -> CartResult:
        op = CartOperation.REMOVE
        async with self._lock:
            if _find_index(self._cart, product_id) == -1:
                logger.warning(f"Could not remove product {product_id}: not in cart")
                return self._result(op, CartOutcome.NOT_IN_CART, product_id)

            await self._commit([product for product in self._cart if product.id != product_id])
            logger.info(f"Removed from cart {self.key}: product_id={product_id}")
            return self._result(op, CartOutcome.SUCCESS, product_id)

    async def update_product_amount(self, product_id: int, amount: int) -> CartResult:
        op = CartOperation.UPDATE_AMOUNT
        if amount <= 0:
            return self._result(op, CartOutcome.IGNORED, product_id)

        async with self._lock:
            try:
                stock = await self.client.get_stock(product_id)
            except StockQueryError as e:
                logger.warning(f"Could not update product {product_id}: {str(e)}")
                return self._result(op, CartOutcome.STOCK_UNAVAILABLE, product_id)

            index = _find_index(self._cart, product_id)
            if index == -1:
                logger.warning(f"Could not update product {product_id}: not in cart")
                return self._result(op, CartOutcome.NOT_IN_CART, product_id)

            if stock.amount < amount:
                logger.info(f"Product {product_id} out of stock: {stock.amount} available, {amount} requested")
                return self._result(op, CartOutcome.OUT_OF_STOCK, product_id)

            new_cart = list(self._cart)
            new_cart[index] = self._cart[index].model_copy(update={"amount": amount})

            await self._commit(new_cart)
            logger.info(f"Updated cart {self.key}: product_id={product_id}, amount={amount}")
            return self._result(op, CartOutcome.SUCCESS, product_id)


class CartRegistry:
    """
    Cart managers of the sessions served by one process, keyed by slot.

    Only the most recently used managers are kept; an evicted cart is
    loaded again from its storage slot on the next request.
    """

    def __init__(self, storage: CartStorage, client: StorefrontClient, key_prefix: str, max_size: int = 1024):
        self.storage = storage
        self.client = client
        self.key_prefix = key_prefix
        self.max_size = max_size
        self._managers: "OrderedDict[str, CartManager]" = OrderedDict()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._managers)

    def key_for(self, cart_id: str) -> str:
        return f"{self.key_prefix}:{cart_id}"

    def _evict(self):
        # The manager just requested and managers in the middle of a mutation stay cached.
        for key in list(self._managers)[:-1]:
            if len(self._managers) <= self.max_size:
                break
            if not self._managers[key].busy:
                del self._managers[key]
                logger.debug(f"Evicted cart manager {key}")

    async def get(self, cart_id: str) -> CartManager:
        key = self.key_for(cart_id)
        async with self._lock:
            manager = self._managers.get(key)
            if manager is None:
                manager = await CartManager.load(self.storage, self.client, key)
                self._managers[key] = manager
            self._managers.move_to_end(key)
            self._evict()
            return manager
