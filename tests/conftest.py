import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from shopcart.core.storefront_client import StorefrontClient
from shopcart.db.base import Base
from shopcart.db import models  # noqa: F401
from shopcart.services.cart import CartManager
from shopcart.services.storage import InMemoryStorage


DATABASE_URL = "sqlite+aiosqlite:///:memory:"
CART_KEY = "@RocketShoes:cart"
BASE_URL = "http://storefront.test"


class FakeStorefront:
    """Stands in for the stock/products API behind an httpx.MockTransport."""

    def __init__(self):
        self.stock = {}
        self.products = {}
        self.requests = []

    def add(self, product_id, amount, title=None, price=100.0):
        self.stock[product_id] = amount
        self.products[product_id] = {
            "id": product_id,
            "title": title or f"Tênis {product_id}",
            "price": price,
            "image": f"https://images.test/{product_id}.jpg",
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request.url.path)
        resource, _, raw_id = request.url.path.strip("/").partition("/")
        product_id = int(raw_id)
        if resource == "stock" and product_id in self.stock:
            return httpx.Response(200, json={"id": product_id, "amount": self.stock[product_id]})
        if resource == "products" and product_id in self.products:
            return httpx.Response(200, json=self.products[product_id])
        return httpx.Response(404, json={})


@pytest.fixture
def storefront():
    return FakeStorefront()


@pytest.fixture
async def storefront_client(storefront):
    client = StorefrontClient(BASE_URL, timeout=5.0, transport=httpx.MockTransport(storefront.handler))
    yield client
    await client.close()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
async def manager(storage, storefront_client):
    return await CartManager.load(storage, storefront_client, CART_KEY)


@pytest.fixture
async def engine():
    engine = create_async_engine(DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
