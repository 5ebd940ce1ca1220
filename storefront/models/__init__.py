# Models
from .user import User, UserAddress
from .product import Category, Product
from .payment_method import PaymentMethod
from .cart import Cart, CartItem
from .order import Order, OrderItem, OrderStatusHistory, OrderStatus, OrderItemStatus

__all__ = [
    "User",
    "UserAddress",
    "Category",
    "Product",
    "PaymentMethod",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatusHistory",
    "OrderStatus",
    "OrderItemStatus",
]
