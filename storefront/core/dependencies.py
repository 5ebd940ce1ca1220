"""依赖注入配置模块"""

from fastapi import Depends

# 数据库会话依赖
from storefront.db.session import SessionLocal
from sqlalchemy.orm import Session

# Redis 依赖
from storefront.core.redis import redis_client

from storefront.services.cart_service import CartService
from storefront.services.checkout_service import CheckoutService
from storefront.services.notification_service import EmailDispatcher
from storefront.services.order_service import OrderService
from storefront.services.payment_method_service import PaymentMethodService
from storefront.services.stock_service import StockService


def get_redis():
    """获取 Redis 客户端"""
    return redis_client

def get_notifier():
    """获取通知发送器（投递到 Celery 队列）"""
    return EmailDispatcher()

def get_db() -> Session:
    """获取数据库会话"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_stock_service(
    db: Session = Depends(get_db),
    redis = Depends(get_redis),
) -> StockService:
    return StockService(db=db, redis=redis)


def get_checkout_service(
    db: Session = Depends(get_db),
    redis = Depends(get_redis),
    notifier = Depends(get_notifier),
) -> CheckoutService:
    """获取下单服务实例（依赖注入）"""
    return CheckoutService(db=db, notifier=notifier, redis=redis)


def get_cart_service(db: Session = Depends(get_db)) -> CartService:
    return CartService(db=db)


def get_order_service(
    db: Session = Depends(get_db),
    notifier = Depends(get_notifier),
) -> OrderService:
    return OrderService(db=db, notifier=notifier)


def get_payment_method_service(db: Session = Depends(get_db)) -> PaymentMethodService:
    return PaymentMethodService(db=db)


# 常用的依赖注入别名
DatabaseDep = Depends(get_db)
RedisDep = Depends(get_redis)
StockServiceDep = Depends(get_stock_service)
CheckoutServiceDep = Depends(get_checkout_service)
CartServiceDep = Depends(get_cart_service)
OrderServiceDep = Depends(get_order_service)
PaymentMethodServiceDep = Depends(get_payment_method_service)
