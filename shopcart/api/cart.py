from fastapi import APIRouter, Depends, HTTPException
import logging

from shopcart.api.dependencies import get_cart_manager
from shopcart.schemas.cart import CartItemUpdate, CartResponse
from shopcart.services.cart import CartManager, CartOutcome, CartResult
from shopcart.services.notifications import notification_for

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/cart", tags=["cart"])

FAILURE_STATUS = {
    CartOutcome.OUT_OF_STOCK: 409,
    CartOutcome.NOT_IN_CART: 404,
    CartOutcome.STOCK_UNAVAILABLE: 502,
    CartOutcome.PRODUCT_UNAVAILABLE: 502,
}


def to_response(result: CartResult) -> CartResponse:
    """Turn an operation result into a response, raising HTTPException for failures."""
    message = notification_for(result)
    if not result.ok:
        raise HTTPException(status_code=FAILURE_STATUS[result.outcome], detail=message)
    return CartResponse.from_cart(result.cart, message=message)


@router.get("", response_model=CartResponse)
async def get_cart(manager: CartManager = Depends(get_cart_manager)):
    """Get current shopping cart."""
    return CartResponse.from_cart(manager.cart)


@router.post("/add/{product_id}", response_model=CartResponse)
async def add_to_cart(product_id: int, manager: CartManager = Depends(get_cart_manager)):
    """Add one unit of a product to the cart."""
    return to_response(await manager.add_product(product_id))


@router.delete("/remove/{product_id}", response_model=CartResponse)
async def remove_from_cart(product_id: int, manager: CartManager = Depends(get_cart_manager)):
    """Remove a product from the cart."""
    return to_response(await manager.remove_product(product_id))


@router.put("/update", response_model=CartResponse)
async def update_cart_item(item: CartItemUpdate, manager: CartManager = Depends(get_cart_manager)):
    """Set the amount of a product already in the cart."""
    return to_response(await manager.update_product_amount(item.product_id, item.amount))
