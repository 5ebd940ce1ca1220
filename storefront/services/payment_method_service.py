"""已保存支付方式管理"""

import logging
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.exceptions import ConflictError, MaxPaymentMethodsReached, NotFound
from storefront.core.id_generator import next_id
from storefront.db.session import unit_of_work
from storefront.models.order import Order
from storefront.models.payment_method import PaymentMethod
from storefront.models.user import User
from storefront.schemas.checkout import PaymentCard

logger = logging.getLogger(__name__)


class PaymentMethodService:

    def __init__(self, db: Session, max_per_user: int = settings.MAX_PAYMENT_METHODS_PER_USER):
        self.db = db
        self.max_per_user = max_per_user

    def list_payment_methods(self, user_id: int) -> List[PaymentMethod]:
        return self.db.execute(
            select(PaymentMethod)
            .where(PaymentMethod.user_id == user_id)
            .order_by(PaymentMethod.created_at, PaymentMethod.payment_id)
        ).scalars().all()

    def get_default(self, user_id: int) -> Optional[PaymentMethod]:
        return self.db.execute(
            select(PaymentMethod)
            .where(PaymentMethod.user_id == user_id, PaymentMethod.is_default.is_(True))
            .limit(1)
        ).scalar_one_or_none()

    def add_payment_method(
        self,
        user_id: int,
        card: PaymentCard,
        is_default: Optional[bool] = None,
    ) -> PaymentMethod:
        """保存卡片

        每个用户最多 max_per_user 张；第一张卡或 is_default=True 时取消其他卡的默认标记。
        """
        with unit_of_work(self.db):
            # 锁住用户行，同一用户的并发新增按顺序检查数量上限
            user = self.db.execute(
                select(User.user_id).where(User.user_id == user_id).with_for_update()
            ).scalar_one_or_none()
            if user is None:
                raise NotFound("User not found")

            existing = self.db.execute(
                select(func.count()).select_from(PaymentMethod).where(PaymentMethod.user_id == user_id)
            ).scalar_one()
            if existing >= self.max_per_user:
                raise MaxPaymentMethodsReached(self.max_per_user)

            if is_default or existing == 0:
                self.db.execute(
                    update(PaymentMethod)
                    .where(PaymentMethod.user_id == user_id)
                    .values(is_default=False)
                )

            method = PaymentMethod(
                payment_id=next_id(),
                user_id=user_id,
                card_type=card.card_type,
                last_four=card.last_four,
                holder_name=card.holder_name,
                expiry_date=card.expiry_date,
                is_default=is_default if is_default is not None else existing == 0,
            )
            self.db.add(method)

        logger.info(f"新增支付方式: payment_id={method.payment_id}, user_id={user_id}")
        return method

    def delete_payment_method(self, user_id: int, payment_id: int) -> None:
        """删除用户自己的卡；删除默认卡时把最早的另一张设为默认"""
        with unit_of_work(self.db):
            method = self.db.execute(
                select(PaymentMethod).where(
                    PaymentMethod.payment_id == payment_id,
                    PaymentMethod.user_id == user_id,
                )
            ).scalar_one_or_none()
            if method is None:
                raise NotFound("Payment method not found")

            used = self.db.execute(
                select(Order.order_id).where(Order.payment_method_id == payment_id).limit(1)
            ).first()
            if used is not None:
                raise ConflictError(f"Payment method {payment_id} is used by existing orders")

            if method.is_default:
                successor = self.db.execute(
                    select(PaymentMethod)
                    .where(
                        PaymentMethod.user_id == user_id,
                        PaymentMethod.payment_id != payment_id,
                    )
                    .order_by(PaymentMethod.created_at, PaymentMethod.payment_id)
                    .limit(1)
                ).scalar_one_or_none()
                if successor is not None:
                    successor.is_default = True

            self.db.delete(method)

        logger.info(f"删除支付方式: payment_id={payment_id}, user_id={user_id}")
