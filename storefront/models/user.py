from sqlalchemy import (
    Column,
    BigInteger,
    String,
    Boolean,
    TIMESTAMP,
    ForeignKey,
    func,
)
from storefront.db.base import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    email = Column(
        String(255),
        nullable=False,
        unique=True,
        comment="登录邮箱，也是订单通知的默认收件地址",
    )

    password_hash = Column(
        String(255),
        nullable=False,
    )

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)

    is_active = Column(
        Boolean,
        nullable=False,
        server_default="1",
        default=True,
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


class UserAddress(Base):
    __tablename__ = "user_addresses"

    address_id = Column(
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

    street_address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    postal_code = Column(String(20), nullable=False)
    country = Column(String(100), nullable=False)

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
