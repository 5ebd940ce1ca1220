"""并发下单测试：同一商品库存 N，M > N 个并发下单各买 1 件"""
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest
from sqlalchemy import event
from sqlalchemy.orm import sessionmaker

from conftest import ADDRESS_ID, LAPTOP_ID, SAVED_CARD_ID, USER_ID, make_engine, stock_of, count_rows
from storefront.core.exceptions import InsufficientStock
from storefront.db.base import Base
from storefront.models import Order, OrderItem, Product
from storefront.schemas.checkout import CheckoutRequest
from storefront.services.checkout_service import CheckoutService
from storefront.services.stock_service import StockService


@pytest.fixture
def locking_engine(tmp_path):
    """SQLite 事务以 BEGIN IMMEDIATE 开始，写事务之间串行等待而不是直接报 busy"""
    engine = make_engine(tmp_path / "concurrency.db")

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def seeded_factory(locking_engine, seeded):
    """把主测试库中的示例数据复制到并发测试库"""
    factory = sessionmaker(bind=locking_engine, autoflush=False, expire_on_commit=False)
    with factory() as db:
        for table in Base.metadata.sorted_tables:
            rows = seeded.execute(table.select()).mappings().all()
            if rows:
                db.execute(table.insert(), [dict(row) for row in rows])
        db.commit()
    return factory


def _set_stock(factory, product_id, quantity):
    with factory() as db:
        db.get(Product, product_id).stock_quantity = quantity
        db.commit()


def test_concurrent_checkouts_never_oversell(seeded_factory):
    stock, buyers = 3, 8
    _set_stock(seeded_factory, LAPTOP_ID, stock)

    def buy_one(_):
        with seeded_factory() as db:
            service = CheckoutService(db, Mock())
            request = CheckoutRequest.model_validate({
                "products": [{"productId": LAPTOP_ID, "quantity": 1, "basePrice": "100.00"}],
                "paymentMethod": SAVED_CARD_ID,
                "userId": USER_ID,
                "addressId": ADDRESS_ID,
            })
            try:
                service.checkout(request)
                return "ok"
            except InsufficientStock:
                return "insufficient"

    with ThreadPoolExecutor(max_workers=buyers) as pool:
        outcomes = list(pool.map(buy_one, range(buyers)))

    assert outcomes.count("ok") == stock
    assert outcomes.count("insufficient") == buyers - stock
    with seeded_factory() as db:
        assert stock_of(db, LAPTOP_ID) == 0
        assert count_rows(db, Order) == stock
        assert count_rows(db, OrderItem) == stock


def test_concurrent_decrements_stop_at_zero(seeded_factory):
    _set_stock(seeded_factory, LAPTOP_ID, 5)

    def decrement(_):
        with seeded_factory() as db:
            ok = StockService(db).decrement_stock(LAPTOP_ID, 2)
            db.commit()
            return ok

    with ThreadPoolExecutor(max_workers=6) as pool:
        results = list(pool.map(decrement, range(6)))

    assert results.count(True) == 2
    with seeded_factory() as db:
        assert stock_of(db, LAPTOP_ID) == 1
