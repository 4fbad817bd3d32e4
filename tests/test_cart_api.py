import httpx
import pytest
from fastapi.testclient import TestClient

from shopcart.core.storefront_client import StorefrontClient
from shopcart.main import create_app
from shopcart.services.storage import InMemoryStorage, load_cart


@pytest.fixture
def cart_storage():
    return InMemoryStorage()


@pytest.fixture
def api(storefront, cart_storage):
    client = StorefrontClient("http://storefront.test", transport=httpx.MockTransport(storefront.handler))
    app = create_app(storage=cart_storage, client=client)
    with TestClient(app) as test_client:
        yield test_client


def test_health(api):
    response = api.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_empty_cart(api):
    response = api.get("/api/cart")

    assert response.status_code == 200
    assert response.json() == {"items": [], "total": 0, "item_count": 0, "message": None}


def test_add_update_remove(api, storefront):
    storefront.add(1, amount=5, price=100.0)
    storefront.add(2, amount=1, price=50.5)

    assert api.post("/api/cart/add/1").status_code == 200
    response = api.post("/api/cart/add/2")
    assert response.json()["item_count"] == 2
    assert response.json()["total"] == 150.5

    response = api.put("/api/cart/update", json={"product_id": 1, "amount": 3})
    assert response.status_code == 200
    assert [(i["id"], i["amount"]) for i in response.json()["items"]] == [(1, 3), (2, 1)]

    response = api.delete("/api/cart/remove/1")
    assert response.status_code == 200
    assert [i["id"] for i in response.json()["items"]] == [2]


def test_out_of_stock_is_conflict(api, storefront):
    storefront.add(1, amount=1)
    api.post("/api/cart/add/1")

    response = api.post("/api/cart/add/1")

    assert response.status_code == 409
    assert response.json()["detail"] == "Quantidade solicitada fora de estoque"
    assert api.get("/api/cart").json()["items"][0]["amount"] == 1


def test_unknown_product_is_bad_gateway(api):
    response = api.post("/api/cart/add/77")

    assert response.status_code == 502
    assert response.json()["detail"] == "Erro na adição do produto"


def test_remove_absent_is_not_found(api):
    response = api.delete("/api/cart/remove/5")

    assert response.status_code == 404
    assert response.json()["detail"] == "Erro na remoção do produto"


def test_update_zero_amount_is_silent(api, storefront):
    storefront.add(1, amount=5)
    api.post("/api/cart/add/1")

    response = api.put("/api/cart/update", json={"product_id": 1, "amount": 0})

    assert response.status_code == 200
    assert response.json()["message"] is None
    assert response.json()["items"][0]["amount"] == 1


def test_each_session_has_its_own_cart(api, storefront, cart_storage):
    storefront.add(1, amount=5)
    api.post("/api/cart/add/1")

    api.cookies.clear()
    assert api.get("/api/cart").json()["items"] == []

    carts = [load_cart(value) for value in cart_storage._items.values()]
    assert len(carts) == 1
    assert carts[0][0].id == 1
    assert all(key.startswith("@RocketShoes:cart:") for key in cart_storage._items)


def test_cookieless_requests_do_not_grow_registry(api):
    registry = api.app.state.cart_registry
    registry.max_size = 50

    for _ in range(200):
        api.cookies.clear()
        assert api.get("/api/cart").status_code == 200

    assert len(registry) <= 50
