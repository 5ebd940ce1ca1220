"""订单查询与状态流转服务"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from storefront.core.exceptions import ConflictError, InvalidRequest, NotFound
from storefront.core.id_generator import next_id
from storefront.db.session import unit_of_work
from storefront.models.order import (
    Order,
    OrderItem,
    OrderItemStatus,
    OrderStatus,
    OrderStatusHistory,
    TERMINAL_ORDER_STATUSES,
)
from storefront.models.user import User
from storefront.services.notification_service import (
    Notifier,
    notify_safely,
    render_status_update,
)

logger = logging.getLogger(__name__)


class OrderService:

    def __init__(self, db: Session, notifier: Optional[Notifier] = None):
        self.db = db
        self.notifier = notifier

    def get_order(self, order_id: int) -> Order:
        order = self.db.execute(
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.order_id == order_id)
        ).scalar_one_or_none()
        if order is None:
            raise NotFound(f"Order ID {order_id} not found")
        return order

    def list_user_orders(self, user_id: int) -> List[Order]:
        return self.db.execute(
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.order_id.desc())
        ).scalars().all()

    def update_status(
        self,
        order_id: int,
        status: OrderStatus,
        comment: Optional[str] = None,
        item_statuses: Optional[Dict[int, OrderItemStatus]] = None,
    ) -> dict:
        """更新订单状态（可同时更新明细状态），记录历史并发送状态通知

        已送达 / 已取消的订单不能再变更状态。
        """
        with unit_of_work(self.db):
            order = self.db.execute(
                select(Order)
                .where(Order.order_id == order_id)
                .with_for_update()
            ).scalar_one_or_none()
            if order is None:
                raise NotFound(f"Order ID {order_id} not found")

            if order.status in TERMINAL_ORDER_STATUSES and order.status != status:
                raise ConflictError(
                    f"Order {order_id} is already {order.status.value} and cannot become {status.value}"
                )

            # 状态未变化且没有明细更新：不记历史、不发通知
            if order.status == status and not item_statuses:
                logger.info(f"订单状态未变化: order_id={order_id}, status={status.value}")
                return {"order_id": order_id, "status": status, "email": None}

            if item_statuses:
                items = {
                    item.order_item_id: item
                    for item in self.db.execute(
                        select(OrderItem).where(OrderItem.order_id == order_id)
                    ).scalars()
                }
                unknown = sorted(set(item_statuses) - set(items))
                if unknown:
                    raise InvalidRequest(
                        f"Order items {unknown} do not belong to order {order_id}"
                    )
                for item_id, item_status in item_statuses.items():
                    items[item_id].status = item_status

            previous = order.status
            order.status = status
            self.db.add(OrderStatusHistory(
                history_id=next_id(),
                order_id=order_id,
                status=status.value,
                comment=comment,
            ))
            email = self.db.execute(
                select(User.email).where(User.user_id == order.user_id)
            ).scalar_one_or_none()

        logger.info(f"订单状态更新: order_id={order_id}, {previous.value} -> {status.value}")

        email_result = None
        if self.notifier is not None:
            email_result = notify_safely(
                self.notifier,
                email,
                f"Order {order_id} is now {status.value}",
                render_status_update(order_id, status.value, comment),
            )
        return {"order_id": order_id, "status": status, "email": email_result}
