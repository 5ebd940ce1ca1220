from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateCartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="userId", gt=0)


class CartItemIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(..., alias="productId", gt=0)
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., alias="unitPrice", ge=0, max_digits=10, decimal_places=2)


class UpdateCartItemsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cart_id: int = Field(..., alias="cartId", gt=0)
    items: List[CartItemIn]


class CartSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    cart_id: int = Field(..., alias="cartId")
    user_id: Optional[int] = Field(None, alias="userId")
    is_active: bool = Field(..., alias="isActive")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class CartItemSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    cart_item_id: int = Field(..., alias="cartItemId")
    product_id: int = Field(..., alias="productId")
    quantity: int
    unit_price: Decimal = Field(..., alias="unitPrice")


class ActiveCartSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    cart_id: int = Field(..., alias="cartId")
    items: List[CartItemSchema] = []
