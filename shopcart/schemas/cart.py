from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class Stock(BaseModel):
    id: int
    amount: int


class Product(BaseModel):
    # Catalogue records may carry more display fields than we model.
    model_config = ConfigDict(extra="allow")

    id: int
    title: str = ""
    price: float = 0.0
    image: str = ""
    amount: int = Field(default=1, ge=1)


class CartItemUpdate(BaseModel):
    product_id: int
    amount: int


class CartResponse(BaseModel):
    items: List[Product]
    total: float
    item_count: int
    message: Optional[str] = None

    @classmethod
    def from_cart(cls, cart: List[Product], message: Optional[str] = None) -> "CartResponse":
        total = sum(product.price * product.amount for product in cart)
        return cls(
            items=cart,
            total=round(total, 2),
            item_count=len(cart),
            message=message
        )
