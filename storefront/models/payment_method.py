from sqlalchemy import (
    Column,
    BigInteger,
    String,
    Boolean,
    Date,
    TIMESTAMP,
    ForeignKey,
    func,
)
from storefront.db.base import Base


class PaymentMethod(Base):
    """已保存的卡片信息（只存储，不扣款）"""

    __tablename__ = "payment_methods"

    payment_id = Column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    user_id = Column(
        BigInteger,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    card_type = Column(String(50), nullable=False)
    last_four = Column(String(4), nullable=False)
    holder_name = Column(String(255), nullable=False)
    expiry_date = Column(Date, nullable=False)

    is_default = Column(
        Boolean,
        nullable=False,
        server_default="0",
        default=False,
    )

    created_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
