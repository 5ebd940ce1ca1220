# storefront/schemas/order.py
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.models.order import OrderItemStatus, OrderStatus


class OrderItemSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    order_item_id: int = Field(..., alias="orderItemId")
    product_id: int = Field(..., alias="productId")
    quantity: int
    unit_price: Decimal = Field(..., alias="unitPrice")
    subtotal: Decimal
    status: OrderItemStatus


class OrderSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    order_id: int = Field(..., alias="orderId")
    user_id: int = Field(..., alias="userId")
    shipping_address_id: int = Field(..., alias="shippingAddressId")
    billing_address_id: int = Field(..., alias="billingAddressId")
    payment_method_id: int = Field(..., alias="paymentMethodId")
    total_amount: Decimal = Field(..., alias="totalAmount")
    status: OrderStatus
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    items: List[OrderItemSchema] = []


# 更新订单状态请求
class UpdateOrderStatusRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: OrderStatus
    comment: Optional[str] = Field(None, max_length=1000)
    # 可选：按明细ID更新明细状态
    item_statuses: Optional[Dict[int, OrderItemStatus]] = Field(None, alias="itemStatuses")


class UpdateOrderStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: int = Field(..., alias="orderId")
    status: OrderStatus
    email: Optional[dict] = None
    message: str = "Order status updated successfully"
