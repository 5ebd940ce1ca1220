"""订单查询与状态管理 API 路由"""

from fastapi import APIRouter, HTTPException, Path
from typing import List
import logging

from storefront.core.dependencies import OrderServiceDep
from storefront.core.exceptions import StorefrontError
from storefront.schemas.order import (
    OrderSchema,
    UpdateOrderStatusRequest,
    UpdateOrderStatusResponse,
)
from storefront.services.order_service import OrderService

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/orders",
    tags=["订单管理"],
    responses={
        404: {"description": "Order not found"},
        500: {"description": "Internal server error"}
    }
)


@router.get("/user/{user_id}", response_model=List[OrderSchema], summary="List a user's orders")
async def list_user_orders(
    user_id: int = Path(..., gt=0),
    service: OrderService = OrderServiceDep,
):
    try:
        return service.list_user_orders(user_id)
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"查询用户订单失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{order_id}", response_model=OrderSchema, summary="Get an order with its items")
async def get_order(
    order_id: int = Path(..., gt=0),
    service: OrderService = OrderServiceDep,
):
    try:
        return service.get_order(order_id)
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"查询订单失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch(
    "/{order_id}/status",
    response_model=UpdateOrderStatusResponse,
    summary="Update order status",
    description="""Move an order to a new status and optionally update item statuses.

    Delivered and cancelled orders are final. A history row is recorded and the
    customer is notified by email (best effort).
    """,
)
async def update_order_status(
    request: UpdateOrderStatusRequest,
    order_id: int = Path(..., gt=0),
    service: OrderService = OrderServiceDep,
):
    try:
        result = service.update_status(
            order_id,
            request.status,
            comment=request.comment,
            item_statuses=request.item_statuses,
        )
        return UpdateOrderStatusResponse(**result)
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"更新订单状态失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
