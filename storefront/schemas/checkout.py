"""结算（下单）接口的请求 / 响应模型"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class CheckoutLine(BaseModel):
    """结算商品行"""
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(..., alias="productId", gt=0, description="商品ID")
    quantity: int = Field(..., gt=0, description="购买数量")
    base_price: Decimal = Field(
        ...,
        alias="basePrice",
        ge=0,
        max_digits=10,
        decimal_places=2,
        description="记录到订单中的单价",
    )


class PaymentCard(BaseModel):
    """下单时内联提交的卡片信息"""
    model_config = ConfigDict(populate_by_name=True)

    card_type: str = Field(..., alias="cardType", min_length=1, max_length=50)
    last_four: str = Field(..., alias="lastFour", pattern=r"^\d{4}$")
    holder_name: str = Field(..., alias="holderName", min_length=1, max_length=255)
    expiry_date: date = Field(..., alias="expiryDate")


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    products: List[CheckoutLine] = Field(..., min_length=1)
    # 内联卡片信息，或已保存的支付方式ID
    payment_method: Optional[Union[PaymentCard, int]] = Field(None, alias="paymentMethod")
    user_id: int = Field(..., alias="userId", gt=0)
    address_id: int = Field(..., alias="addressId", gt=0)
    email: Optional[str] = Field(None, max_length=255)
    cart_id: Optional[int] = Field(None, alias="cartId", gt=0)


class CheckoutResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: int = Field(..., alias="orderId")
    order_time: datetime = Field(..., alias="orderTime")
    products: List[CheckoutLine]
    email: Optional[Any] = Field(None, description="通知发送结果")
    message: str = "Order created successfully"
