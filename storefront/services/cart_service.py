"""购物车服务"""

import logging
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from storefront.core.exceptions import ConflictError, NotFound
from storefront.core.id_generator import next_id
from storefront.db.session import unit_of_work
from storefront.models.cart import Cart, CartItem
from storefront.models.product import Product
from storefront.models.user import User
from storefront.schemas.cart import CartItemIn

logger = logging.getLogger(__name__)


class CartService:

    def __init__(self, db: Session):
        self.db = db

    def create_cart(self, user_id: int) -> Cart:
        with unit_of_work(self.db):
            if self.db.get(User, user_id) is None:
                raise NotFound("User not found")
            cart = Cart(cart_id=next_id(), user_id=user_id, is_active=True)
            self.db.add(cart)
        logger.info(f"创建购物车: cart_id={cart.cart_id}, user_id={user_id}")
        return cart

    def replace_items(self, cart_id: int, items: List[CartItemIn]) -> List[CartItem]:
        """清空购物车后写入新的商品列表（同一事务）"""
        with unit_of_work(self.db):
            cart = self.db.get(Cart, cart_id)
            if cart is None:
                raise NotFound("Cart not found")
            if not cart.is_active:
                raise ConflictError(f"Cart {cart_id} is no longer active")

            product_ids = {item.product_id for item in items}
            known = set(self.db.execute(
                select(Product.product_id).where(Product.product_id.in_(product_ids))
            ).scalars()) if product_ids else set()
            missing = [item.product_id for item in items if item.product_id not in known]
            if missing:
                raise NotFound(f"Product ID {missing[0]} not found")

            self.db.execute(delete(CartItem).where(CartItem.cart_id == cart_id))
            new_items = [
                CartItem(
                    cart_item_id=next_id(),
                    cart_id=cart_id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
                for item in items
            ]
            self.db.add_all(new_items)
        logger.info(f"更新购物车: cart_id={cart_id}, items={len(new_items)}")
        return new_items

    def get_active_cart(self, user_id: int) -> dict:
        """获取用户当前有效购物车，不存在时自动创建"""
        cart = self.db.execute(
            select(Cart)
            .where(Cart.user_id == user_id, Cart.is_active.is_(True))
            .order_by(Cart.created_at.desc())
            .limit(1)
        ).scalar_one_or_none()

        if cart is None:
            if self.db.get(User, user_id) is None:
                raise NotFound("User not found")
            with unit_of_work(self.db):
                cart = Cart(cart_id=next_id(), user_id=user_id, is_active=True)
                self.db.add(cart)
            logger.info(f"自动创建购物车: cart_id={cart.cart_id}, user_id={user_id}")

        items = self.db.execute(
            select(CartItem)
            .where(CartItem.cart_id == cart.cart_id)
            .order_by(CartItem.cart_item_id)
        ).scalars().all()
        return {"cart_id": cart.cart_id, "items": items}

    def delete_cart(self, cart_id: int) -> None:
        with unit_of_work(self.db):
            self.db.execute(delete(CartItem).where(CartItem.cart_id == cart_id))
            result = self.db.execute(delete(Cart).where(Cart.cart_id == cart_id))
            if result.rowcount == 0:
                raise NotFound("Cart not found")
        logger.info(f"删除购物车: cart_id={cart_id}")
