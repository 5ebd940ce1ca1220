from sqlalchemy import (
    Column,
    BigInteger,
    Integer,
    Numeric,
    Boolean,
    TIMESTAMP,
    ForeignKey,
    func,
)
from sqlalchemy.orm import relationship
from storefront.db.base import Base


class Cart(Base):
    __tablename__ = "carts"

    cart_id = Column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    user_id = Column(
        BigInteger,
        ForeignKey("users.user_id"),
        nullable=True,
        index=True,
    )

    is_active = Column(
        Boolean,
        nullable=False,
        server_default="1",
        default=True,
    )

    last_activity = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=True,
    )

    created_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    items = relationship(
        "CartItem",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CartItem.added_at",
    )


class CartItem(Base):
    __tablename__ = "cart_items"

    cart_item_id = Column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    cart_id = Column(
        BigInteger,
        ForeignKey("carts.cart_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    product_id = Column(
        BigInteger,
        ForeignKey("products.product_id"),
        nullable=False,
    )

    quantity = Column(Integer, nullable=False)

    unit_price = Column(
        Numeric(10, 2),
        nullable=False,
        comment="加入购物车时的单价",
    )

    added_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=True,
    )

    updated_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=True,
    )
