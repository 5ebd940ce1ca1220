import enum

from sqlalchemy import (
    Column,
    BigInteger,
    Integer,
    Numeric,
    String,
    Text,
    TIMESTAMP,
    Enum,
    ForeignKey,
    Index,
    func,
)
from sqlalchemy.orm import relationship
from storefront.db.base import Base


# 1️ 订单状态枚举

class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# 订单明细状态在订单状态基础上增加 returned
class OrderItemStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


TERMINAL_ORDER_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# 2️ 订单表

class Order(Base):
    __tablename__ = "orders"

    order_id = Column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    user_id = Column(
        BigInteger,
        ForeignKey("users.user_id"),
        nullable=False,
        index=True,
    )

    shipping_address_id = Column(
        BigInteger,
        ForeignKey("user_addresses.address_id"),
        nullable=False,
    )

    billing_address_id = Column(
        BigInteger,
        ForeignKey("user_addresses.address_id"),
        nullable=False,
    )

    payment_method_id = Column(
        BigInteger,
        ForeignKey("payment_methods.payment_id"),
        nullable=False,
    )

    total_amount = Column(
        Numeric(10, 2),
        nullable=False,
        comment="含税总金额",
    )

    status = Column(
        Enum(
            OrderStatus,
            name="order_status_type",
            values_callable=_enum_values,
            native_enum=False,
            length=50,
        ),
        nullable=False,
        default=OrderStatus.PENDING,
        server_default=OrderStatus.PENDING.value,
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
        "OrderItem",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="OrderItem.order_item_id",
    )


# 3️ 订单明细表（价格快照，创建后不再修改数量与金额）

class OrderItem(Base):
    __tablename__ = "order_items"

    order_item_id = Column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    order_id = Column(
        BigInteger,
        ForeignKey("orders.order_id", ondelete="CASCADE"),
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
        comment="下单时单价快照",
    )

    subtotal = Column(
        Numeric(10, 2),
        nullable=False,
        comment="quantity * unit_price",
    )

    status = Column(
        Enum(
            OrderItemStatus,
            name="order_item_status_type",
            values_callable=_enum_values,
            native_enum=False,
            length=50,
        ),
        nullable=False,
        default=OrderItemStatus.PENDING,
        server_default=OrderItemStatus.PENDING.value,
    )


# 4️ 订单状态变更历史

class OrderStatusHistory(Base):
    __tablename__ = "order_status_history"

    history_id = Column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    order_id = Column(
        BigInteger,
        ForeignKey("orders.order_id", ondelete="CASCADE"),
        nullable=False,
    )

    status = Column(String(50), nullable=False)

    comment = Column(Text, nullable=True)

    created_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


Index(
    "idx_order_status_history_order_created",
    OrderStatusHistory.order_id,
    OrderStatusHistory.created_at.desc(),
)
