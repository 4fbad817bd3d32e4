import uuid

from fastapi import Request

from shopcart.services.cart import CartManager, CartRegistry


def get_cart_registry(request: Request) -> CartRegistry:
    return request.app.state.cart_registry


async def get_cart_manager(request: Request) -> CartManager:
    """
    Dependency resolving the cart of the current browser session.
    A new session gets a fresh cart id stored in its signed session cookie.
    """
    cart_id = request.session.get("cart_id")
    if not cart_id:
        cart_id = uuid.uuid4().hex
        request.session["cart_id"] = cart_id
    return await get_cart_registry(request).get(cart_id)
