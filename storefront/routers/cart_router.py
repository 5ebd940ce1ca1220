"""购物车与结算 API 路由"""

from fastapi import APIRouter, HTTPException, Path
import logging

from storefront.core.dependencies import CartServiceDep, CheckoutServiceDep
from storefront.core.exceptions import StorefrontError
from storefront.schemas.cart import (
    ActiveCartSchema,
    CartItemSchema,
    CartSchema,
    CreateCartRequest,
    UpdateCartItemsRequest,
)
from storefront.schemas.checkout import CheckoutRequest, CheckoutResponse
from storefront.services.cart_service import CartService
from storefront.services.checkout_service import CheckoutService

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/cart",
    tags=["购物车与结算"],
    responses={
        400: {"description": "Invalid request"},
        404: {"description": "Resource not found"},
        500: {"description": "Internal server error"}
    }
)


@router.post(
    "/checkout",
    status_code=201,
    response_model=CheckoutResponse,
    summary="Checkout and create an order",
    description="""Validate stock, decrement inventory, persist the payment method,
    create the order with its items and send a confirmation email.

    **Guarantees:**
    - Stock checks, decrements and order creation commit together or not at all
    - Stock never goes below zero, even for concurrent checkouts
    - The confirmation email is sent after commit; its failure does not fail the checkout
    """,
    responses={
        500: {
            "description": "Insufficient stock or persistence failure",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "issues": [
                                {
                                    "code": "insufficient_stock",
                                    "message": "Insufficient stock for product ID 1"
                                }
                            ]
                        }
                    }
                }
            }
        }
    }
)
async def checkout(
    request: CheckoutRequest,
    service: CheckoutService = CheckoutServiceDep,
):
    try:
        result = service.checkout(request)
        return CheckoutResponse(
            order_id=result["order_id"],
            order_time=result["order_time"],
            products=result["products"],
            email=result["email"],
        )
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"下单失败: {str(e)}", exc_info=True)
        # 未知异常统一抛 500
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/create", status_code=201, summary="Create a cart for a user")
async def create_cart(
    request: CreateCartRequest,
    service: CartService = CartServiceDep,
):
    try:
        cart = service.create_cart(request.user_id)
        return {
            "message": "Cart created successfully",
            "data": CartSchema.model_validate(cart).model_dump(by_alias=True),
        }
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"创建购物车失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/update-items", summary="Replace all items of a cart")
async def update_items(
    request: UpdateCartItemsRequest,
    service: CartService = CartServiceDep,
):
    try:
        items = service.replace_items(request.cart_id, request.items)
        return {
            "message": "Cart items updated successfully",
            "data": [CartItemSchema.model_validate(i).model_dump(by_alias=True) for i in items],
        }
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"更新购物车失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/user/{user_id}", summary="Get (or create) the active cart of a user")
async def get_active_cart(
    user_id: int = Path(..., gt=0),
    service: CartService = CartServiceDep,
):
    try:
        cart = service.get_active_cart(user_id)
        return {"data": ActiveCartSchema.model_validate(cart).model_dump(by_alias=True)}
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"查询购物车失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{cart_id}", summary="Delete a cart and its items")
async def delete_cart(
    cart_id: int = Path(..., gt=0),
    service: CartService = CartServiceDep,
):
    try:
        service.delete_cart(cart_id)
        return {"message": "Cart and its items deleted successfully"}
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"删除购物车失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
