from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.schemas.checkout import PaymentCard


class AddPaymentMethodRequest(PaymentCard):
    """保存一张新卡；isDefault 省略时，第一张卡自动成为默认"""
    is_default: Optional[bool] = Field(None, alias="isDefault")


class PaymentMethodSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    payment_id: int = Field(..., alias="paymentId")
    user_id: int = Field(..., alias="userId")
    card_type: str = Field(..., alias="cardType")
    last_four: str = Field(..., alias="lastFour")
    holder_name: str = Field(..., alias="holderName")
    expiry_date: date = Field(..., alias="expiryDate")
    is_default: bool = Field(..., alias="isDefault")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
