"""结算服务：把购物行转换为订单

整个下单过程（支付方式落库、库存校验与扣减、订单与明细创建）在同一个事务中完成，
任何一步失败都会整体回滚；确认邮件在提交之后尽力发送，失败不影响下单结果。
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple, Union

from redis import Redis
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.exceptions import (
    InsufficientStock,
    PaymentMethodUnresolvable,
    ReferenceNotFound,
)
from storefront.core.id_generator import next_id
from storefront.db.session import unit_of_work
from storefront.models.cart import Cart
from storefront.models.order import Order, OrderItem, OrderStatus, OrderStatusHistory
from storefront.models.payment_method import PaymentMethod
from storefront.models.product import Product
from storefront.models.user import User, UserAddress
from storefront.schemas.checkout import CheckoutLine, CheckoutRequest, PaymentCard
from storefront.services.notification_service import (
    Notifier,
    notify_safely,
    render_order_confirmation,
)
from storefront.services.stock_service import StockService

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def compute_totals(lines: Iterable[CheckoutLine], tax_rate: Decimal) -> Tuple[Decimal, Decimal, Decimal]:
    """返回 (subtotal, tax, total)

    税率只作用于税前小计一次，只在总价处四舍五入；tax = total - subtotal，
    保证 Σ 明细小计 + 税 == 总价。
    """
    subtotal = sum((line.base_price * line.quantity for line in lines), Decimal("0"))
    total = (subtotal * (Decimal("1") + tax_rate)).quantize(CENT, rounding=ROUND_HALF_UP)
    return subtotal, total - subtotal, total


class CheckoutService:
    """下单核心服务类"""

    def __init__(
        self,
        db: Session,
        notifier: Notifier,
        redis: Optional[Redis] = None,
        tax_rate: Decimal = settings.TAX_RATE,
    ):
        self.db = db
        self.notifier = notifier
        self.stock = StockService(db, redis)
        self.tax_rate = tax_rate

    def checkout(self, request: CheckoutRequest) -> dict:
        lines = request.products
        subtotal, tax, total = compute_totals(lines, self.tax_rate)

        with unit_of_work(self.db):
            self._ensure_user_and_address(request.user_id, request.address_id)
            payment_method_id = self._resolve_payment_method(request.user_id, request.payment_method)

            product_names = self._check_stock(lines)

            # 按商品ID顺序扣减，多商品并发下单时加锁顺序一致
            for product_id, quantity in sorted(self._requested_quantities(lines).items()):
                if not self.stock.decrement_stock(product_id, quantity):
                    raise InsufficientStock(product_id)

            order = Order(
                order_id=next_id(),
                user_id=request.user_id,
                shipping_address_id=request.address_id,
                billing_address_id=request.address_id,
                payment_method_id=payment_method_id,
                total_amount=total,
                status=OrderStatus.PENDING,
            )
            self.db.add(order)
            self.db.flush()
            self.db.add(OrderStatusHistory(
                history_id=next_id(),
                order_id=order.order_id,
                status=OrderStatus.PENDING.value,
                comment="Order created",
            ))

            for line in lines:
                self.db.add(OrderItem(
                    order_item_id=next_id(),
                    order_id=order.order_id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=line.base_price,
                    subtotal=line.base_price * line.quantity,
                ))

            if request.cart_id is not None:
                self._deactivate_cart(request.cart_id, request.user_id)

            self.db.flush()
            order_time = self.db.execute(
                select(Order.created_at).where(Order.order_id == order.order_id)
            ).scalar_one()

        logger.info(
            f"下单成功: order_id={order.order_id}, user_id={request.user_id}, "
            f"items={len(lines)}, total={total}"
        )

        self.stock.invalidate_cache(product_names.keys())

        html = render_order_confirmation(
            order_id=order.order_id,
            order_time=order_time,
            lines=[
                {
                    "name": product_names[line.product_id],
                    "quantity": line.quantity,
                    "unit_price": line.base_price,
                    "subtotal": line.base_price * line.quantity,
                }
                for line in lines
            ],
            subtotal=subtotal,
            tax=tax,
            total=total,
        )
        email_result = notify_safely(self.notifier, request.email, "Order Receipt", html)

        return {
            "order_id": order.order_id,
            "order_time": order_time,
            "products": lines,
            "email": email_result,
            "subtotal": subtotal,
            "tax": tax,
            "total": total,
        }

    @staticmethod
    def _requested_quantities(lines: Iterable[CheckoutLine]) -> dict:
        requested = {}
        for line in lines:
            requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity
        return requested

    def _check_stock(self, lines: Iterable[CheckoutLine]) -> dict:
        """按输入顺序校验库存，报告第一个不足的商品；返回 {product_id: name}"""
        names = {}
        requested = {}
        for line in lines:
            row = self.db.execute(
                select(Product.product_id, Product.name, Product.stock_quantity)
                .where(Product.product_id == line.product_id)
            ).one_or_none()
            if row is None:
                raise ReferenceNotFound(f"Product ID {line.product_id} not found")

            # 同一商品出现多行时按累计数量校验
            requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity
            if row.stock_quantity < requested[line.product_id]:
                logger.warning(
                    f"库存不足: product_id={line.product_id}, "
                    f"stock={row.stock_quantity}, requested={requested[line.product_id]}"
                )
                raise InsufficientStock(line.product_id)
            names[line.product_id] = row.name
        return names

    def _ensure_user_and_address(self, user_id: int, address_id: int) -> None:
        if self.db.get(User, user_id) is None:
            raise ReferenceNotFound(f"User ID {user_id} not found")
        address = self.db.get(UserAddress, address_id)
        if address is None or address.user_id != user_id:
            raise ReferenceNotFound(f"Address ID {address_id} not found for user {user_id}")

    def _resolve_payment_method(self, user_id: int, payment_method: Union[PaymentCard, int, None]) -> int:
        """内联卡片信息落库生成新ID；已有ID必须属于该用户；否则失败"""
        if isinstance(payment_method, PaymentCard):
            payment_id = next_id()
            self.db.add(PaymentMethod(
                payment_id=payment_id,
                user_id=user_id,
                card_type=payment_method.card_type,
                last_four=payment_method.last_four,
                holder_name=payment_method.holder_name,
                expiry_date=payment_method.expiry_date,
            ))
            self.db.flush()
            return payment_id

        if payment_method is None:
            raise PaymentMethodUnresolvable("Payment method is required")

        existing = self.db.get(PaymentMethod, payment_method)
        if existing is None or existing.user_id != user_id:
            raise PaymentMethodUnresolvable(f"Payment method ID {payment_method} not found")
        return existing.payment_id

    def _deactivate_cart(self, cart_id: int, user_id: int) -> None:
        cart = self.db.get(Cart, cart_id)
        if cart is None or cart.user_id != user_id:
            raise ReferenceNotFound(f"Cart ID {cart_id} not found for user {user_id}")
        cart.is_active = False
