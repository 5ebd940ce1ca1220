"""已保存支付方式 API 路由"""

from fastapi import APIRouter, HTTPException, Path
import logging

from storefront.core.dependencies import PaymentMethodServiceDep
from storefront.core.exceptions import StorefrontError
from storefront.schemas.payment_method import AddPaymentMethodRequest, PaymentMethodSchema
from storefront.services.payment_method_service import PaymentMethodService

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/users/{user_id}/payment-methods",
    tags=["支付方式"],
    responses={
        400: {"description": "Invalid request or maximum payment methods reached"},
        404: {"description": "Resource not found"},
        500: {"description": "Internal server error"}
    }
)


def _dump(method) -> dict:
    return PaymentMethodSchema.model_validate(method).model_dump(mode="json", by_alias=True)


@router.get("", summary="List saved payment methods")
async def list_payment_methods(
    user_id: int = Path(..., gt=0),
    service: PaymentMethodService = PaymentMethodServiceDep,
):
    try:
        methods = service.list_payment_methods(user_id)
        return {
            "message": "Payment methods retrieved successfully",
            "data": [_dump(m) for m in methods],
        }
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"查询支付方式失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/default", summary="Get the default payment method")
async def get_default_payment_method(
    user_id: int = Path(..., gt=0),
    service: PaymentMethodService = PaymentMethodServiceDep,
):
    try:
        method = service.get_default(user_id)
        return {
            "message": "Default payment method retrieved successfully",
            "data": _dump(method) if method is not None else None,
        }
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"查询默认支付方式失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post(
    "",
    status_code=201,
    summary="Save a payment method",
    description="""Save a card for later checkouts.

    **Rules:**
    - At most 3 payment methods per user
    - The first card, or a card added with `isDefault: true`, becomes the default
    """,
)
async def add_payment_method(
    request: AddPaymentMethodRequest,
    user_id: int = Path(..., gt=0),
    service: PaymentMethodService = PaymentMethodServiceDep,
):
    try:
        method = service.add_payment_method(user_id, request, is_default=request.is_default)
        return {"message": "Payment method added successfully", "data": _dump(method)}
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"新增支付方式失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{payment_id}", summary="Delete a saved payment method")
async def delete_payment_method(
    user_id: int = Path(..., gt=0),
    payment_id: int = Path(..., gt=0),
    service: PaymentMethodService = PaymentMethodServiceDep,
):
    try:
        service.delete_payment_method(user_id, payment_id)
        return {"message": "Payment method deleted successfully"}
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"删除支付方式失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
