"""测试配置和 fixtures"""
from datetime import date
from decimal import Decimal
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from redis import Redis
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

import storefront.models  # noqa: F401
from storefront.core.dependencies import get_db, get_notifier, get_redis
from storefront.db.base import Base
from storefront.main import app
from storefront.models import (
    Category,
    Order,
    OrderItem,
    PaymentMethod,
    Product,
    User,
    UserAddress,
)

USER_ID = 1
OTHER_USER_ID = 2
ADDRESS_ID = 10
OTHER_ADDRESS_ID = 20
CATEGORY_ID = 100
LAPTOP_ID = 1000
MOUSE_ID = 1001
SAVED_CARD_ID = 500


def make_engine(path):
    return create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )


@pytest.fixture
def engine(tmp_path):
    """每个测试独立的 SQLite 数据库文件"""
    engine = make_engine(tmp_path / "storefront.db")
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    """创建数据库会话"""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def mock_redis():
    """创建模拟 Redis 客户端"""
    redis_mock = Mock(spec=Redis)
    redis_mock.get.return_value = None
    redis_mock.setex.return_value = True
    redis_mock.delete.return_value = 1
    redis_mock.mget.return_value = [None, None]
    redis_mock.pipeline.return_value = Mock()
    return redis_mock


@pytest.fixture
def mock_notifier():
    """创建模拟通知发送器"""
    notifier = Mock()
    notifier.send.return_value = {"id": "email-1", "status": "queued"}
    return notifier


@pytest.fixture
def seeded(db_session):
    """示例数据：两个用户、地址、分类、两个商品、一张已保存的卡"""
    db_session.add_all([
        User(user_id=USER_ID, email="x@y.com", password_hash="hash", first_name="Ada", last_name="Lovelace"),
        User(user_id=OTHER_USER_ID, email="other@y.com", password_hash="hash", first_name="Alan", last_name="Turing"),
    ])
    db_session.flush()
    db_session.add_all([
        UserAddress(
            address_id=ADDRESS_ID, user_id=USER_ID, street_address="1 Main St",
            city="Toronto", state="ON", postal_code="M5V 1A1", country="Canada",
        ),
        UserAddress(
            address_id=OTHER_ADDRESS_ID, user_id=OTHER_USER_ID, street_address="2 Side St",
            city="Ottawa", state="ON", postal_code="K1A 0A1", country="Canada",
        ),
        Category(category_id=CATEGORY_ID, name="Laptops"),
    ])
    db_session.flush()
    db_session.add_all([
        Product(
            product_id=LAPTOP_ID, category_id=CATEGORY_ID, name="ThinkPad X1",
            base_price=Decimal("100.00"), stock_quantity=5, sku="TP-X1",
        ),
        Product(
            product_id=MOUSE_ID, category_id=CATEGORY_ID, name="Mouse",
            base_price=Decimal("19.99"), stock_quantity=10, sku="MS-01",
        ),
        PaymentMethod(
            payment_id=SAVED_CARD_ID, user_id=USER_ID, card_type="visa",
            last_four="4242", holder_name="Ada Lovelace", expiry_date=date(2030, 1, 31),
        ),
    ])
    db_session.commit()
    return db_session


@pytest.fixture
def inline_card():
    return {
        "cardType": "visa",
        "lastFour": "1111",
        "holderName": "Ada Lovelace",
        "expiryDate": "2030-12-31",
    }


@pytest.fixture
def client(session_factory, mock_notifier):
    """创建测试客户端（覆盖数据库 / Redis / 通知依赖）"""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: None
    app.dependency_overrides[get_notifier] = lambda: mock_notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ==================== 断言辅助 ====================

def stock_of(db, product_id):
    return db.execute(
        select(Product.stock_quantity).where(Product.product_id == product_id)
    ).scalar_one()


def count_rows(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def snapshot(db):
    """库存、订单、明细、支付方式的当前状态"""
    return {
        "stocks": dict(db.execute(select(Product.product_id, Product.stock_quantity)).all()),
        "orders": count_rows(db, Order),
        "order_items": count_rows(db, OrderItem),
        "payment_methods": count_rows(db, PaymentMethod),
    }
