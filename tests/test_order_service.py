"""订单服务与订单路由测试"""
from decimal import Decimal
from unittest.mock import Mock

import pytest
from sqlalchemy import select

from conftest import LAPTOP_ID, MOUSE_ID, OTHER_USER_ID, USER_ID, count_rows
from storefront.core.exceptions import ConflictError, InvalidRequest, NotFound
from storefront.models import OrderItem, OrderItemStatus, OrderStatus, OrderStatusHistory
from storefront.services.checkout_service import CheckoutService
from storefront.services.order_service import OrderService
from test_checkout_service import build_request


@pytest.fixture
def placed_order(seeded, mock_notifier):
    """通过结算流程创建一个订单（2 行明细）"""
    result = CheckoutService(seeded, mock_notifier).checkout(build_request([
        (LAPTOP_ID, 1, "100.00"),
        (MOUSE_ID, 2, "19.99"),
    ]))
    mock_notifier.reset_mock()
    return result["order_id"]


def history_of(db, order_id):
    return db.execute(
        select(OrderStatusHistory.status, OrderStatusHistory.comment)
        .where(OrderStatusHistory.order_id == order_id)
        .order_by(OrderStatusHistory.created_at, OrderStatusHistory.history_id)
    ).all()


class TestOrderService:
    """订单服务测试类"""

    def test_get_order_with_items(self, seeded, placed_order):
        order = OrderService(seeded).get_order(placed_order)

        assert order.status == OrderStatus.PENDING
        assert order.total_amount == Decimal("158.18")
        assert sorted(item.product_id for item in order.items) == [LAPTOP_ID, MOUSE_ID]

    def test_get_unknown_order(self, seeded):
        with pytest.raises(NotFound):
            OrderService(seeded).get_order(987654321)

    def test_list_user_orders(self, seeded, placed_order):
        service = OrderService(seeded)

        assert [o.order_id for o in service.list_user_orders(USER_ID)] == [placed_order]
        assert service.list_user_orders(OTHER_USER_ID) == []

    def test_update_status_records_history_and_notifies(self, seeded, placed_order, mock_notifier):
        result = OrderService(seeded, mock_notifier).update_status(
            placed_order, OrderStatus.SHIPPED, comment="Left the warehouse"
        )

        assert result["status"] == OrderStatus.SHIPPED
        assert result["email"] == {"id": "email-1", "status": "queued"}
        seeded.expire_all()
        assert OrderService(seeded).get_order(placed_order).status == OrderStatus.SHIPPED
        assert history_of(seeded, placed_order)[-1] == ("shipped", "Left the warehouse")

        sender, to, subject, html = mock_notifier.send.call_args.args
        assert to == "x@y.com"
        assert subject == f"Order {placed_order} is now shipped"
        assert "Left the warehouse" in html

    def test_update_item_statuses(self, seeded, placed_order):
        item_ids = seeded.execute(
            select(OrderItem.order_item_id)
            .where(OrderItem.order_id == placed_order)
            .order_by(OrderItem.product_id)
        ).scalars().all()

        OrderService(seeded).update_status(
            placed_order,
            OrderStatus.DELIVERED,
            item_statuses={item_ids[0]: OrderItemStatus.RETURNED},
        )

        statuses = dict(seeded.execute(
            select(OrderItem.order_item_id, OrderItem.status)
            .where(OrderItem.order_id == placed_order)
        ).all())
        assert statuses[item_ids[0]] == OrderItemStatus.RETURNED
        assert statuses[item_ids[1]] == OrderItemStatus.PENDING

    def test_unknown_item_is_rejected_without_changes(self, seeded, placed_order):
        with pytest.raises(InvalidRequest):
            OrderService(seeded).update_status(
                placed_order,
                OrderStatus.SHIPPED,
                item_statuses={123: OrderItemStatus.SHIPPED},
            )

        seeded.expire_all()
        assert OrderService(seeded).get_order(placed_order).status == OrderStatus.PENDING
        assert len(history_of(seeded, placed_order)) == 1

    @pytest.mark.parametrize("terminal", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_terminal_status_is_final(self, seeded, placed_order, terminal):
        service = OrderService(seeded)
        service.update_status(placed_order, terminal)

        with pytest.raises(ConflictError):
            service.update_status(placed_order, OrderStatus.PROCESSING)

        seeded.expire_all()
        assert service.get_order(placed_order).status == terminal

    @pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.DELIVERED])
    def test_repeating_current_status_is_a_no_op(self, seeded, placed_order, mock_notifier, status):
        service = OrderService(seeded, mock_notifier)
        if status != OrderStatus.PENDING:
            service.update_status(placed_order, status)
        history_before = history_of(seeded, placed_order)
        mock_notifier.reset_mock()

        result = service.update_status(placed_order, status, comment="again")

        assert result == {"order_id": placed_order, "status": status, "email": None}
        assert history_of(seeded, placed_order) == history_before
        mock_notifier.send.assert_not_called()

    def test_unknown_order(self, seeded):
        with pytest.raises(NotFound):
            OrderService(seeded).update_status(987654321, OrderStatus.SHIPPED)
        assert count_rows(seeded, OrderStatusHistory) == 0

    def test_notification_failure_does_not_fail_update(self, seeded, placed_order):
        notifier = Mock()
        notifier.send.side_effect = ConnectionError("smtp down")

        result = OrderService(seeded, notifier).update_status(placed_order, OrderStatus.PROCESSING)

        assert result["email"] == {"error": "smtp down"}
        seeded.expire_all()
        assert OrderService(seeded).get_order(placed_order).status == OrderStatus.PROCESSING


class TestOrderRouter:
    """订单路由测试类"""

    def test_get_order(self, client, placed_order):
        response = client.get(f"/api/v1/orders/{placed_order}")

        assert response.status_code == 200
        data = response.json()
        assert data["orderId"] == placed_order
        assert data["userId"] == USER_ID
        assert len(data["items"]) == 2

    def test_get_unknown_order(self, client, seeded):
        response = client.get("/api/v1/orders/987654321")

        assert response.status_code == 404
        assert response.json()["error"]["issues"][0]["code"] == "not_found"

    def test_list_user_orders(self, client, placed_order):
        response = client.get(f"/api/v1/orders/user/{USER_ID}")

        assert response.status_code == 200
        assert [o["orderId"] for o in response.json()] == [placed_order]

    def test_update_status(self, client, placed_order, mock_notifier):
        response = client.patch(
            f"/api/v1/orders/{placed_order}/status",
            json={"status": "processing", "comment": "Payment captured"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["orderId"] == placed_order
        assert data["status"] == "processing"
        assert data["message"] == "Order status updated successfully"
        mock_notifier.send.assert_called_once()

    def test_update_status_rejects_unknown_status(self, client, placed_order):
        response = client.patch(f"/api/v1/orders/{placed_order}/status", json={"status": "lost"})

        assert response.status_code == 400
        assert "status" in response.json()["error"]["issues"][0]["message"]

    def test_update_item_with_unknown_id(self, client, placed_order):
        response = client.patch(
            f"/api/v1/orders/{placed_order}/status",
            json={"status": "shipped", "itemStatuses": {"123": "shipped"}},
        )

        assert response.status_code == 400
        assert response.json()["error"]["issues"][0]["code"] == "invalid_request"

    def test_leaving_cancelled_is_a_conflict(self, client, placed_order):
        client.patch(f"/api/v1/orders/{placed_order}/status", json={"status": "cancelled"})

        response = client.patch(f"/api/v1/orders/{placed_order}/status", json={"status": "shipped"})

        assert response.status_code == 500
        assert response.json()["error"]["issues"][0]["code"] == "conflict"
