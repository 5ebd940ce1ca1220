from sqlalchemy import (
    Column,
    BigInteger,
    Integer,
    Numeric,
    String,
    Text,
    Boolean,
    TIMESTAMP,
    ForeignKey,
    CheckConstraint,
    Index,
    func,
)
from storefront.db.base import Base


class Category(Base):
    __tablename__ = "categories"

    category_id = Column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    name = Column(
        String(100),
        nullable=False,
        unique=True,
    )

    description = Column(Text, nullable=True)

    parent_category_id = Column(
        BigInteger,
        ForeignKey("categories.category_id"),
        nullable=True,
    )

    is_active = Column(
        Boolean,
        nullable=False,
        server_default="1",
        default=True,
    )


class Product(Base):
    __tablename__ = "products"

    product_id = Column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    category_id = Column(
        BigInteger,
        ForeignKey("categories.category_id"),
        nullable=False,
        index=True,
    )

    name = Column(
        String(255),
        nullable=False,
        comment="商品名称",
    )

    description = Column(Text, nullable=True)

    base_price = Column(
        Numeric(10, 2),
        nullable=False,
        comment="基础售价",
    )

    stock_quantity = Column(
        Integer,
        nullable=False,
        server_default="0",
        default=0,
        comment="当前可售库存",
    )

    sku = Column(
        String(50),
        nullable=False,
        unique=True,
        comment="商品唯一SKU",
    )

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
        nullable=False,
        onupdate=func.now(),
    )

    __table_args__ = (
        CheckConstraint(
            "stock_quantity >= 0",
            name="ck_stock_quantity_non_negative",
        ),
    )


# -----------------------------
# 组合索引（按名称搜索）
# -----------------------------
Index(
    "idx_products_name",
    Product.name,
)
