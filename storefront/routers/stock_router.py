"""库存与商品目录 API 路由"""

from fastapi import APIRouter, Body, HTTPException, Path
import logging

from storefront.core.dependencies import StockServiceDep
from storefront.core.exceptions import StorefrontError
from storefront.schemas.stock import (
    AddCategoryRequest,
    AddProductRequest,
    BatchStockQueryRequest,
    BatchStockResponse,
    CategoryResponse,
    ProductResponse,
    RestockRequest,
    StockResponse,
)
from storefront.services.stock_service import StockService

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/stocks",
    tags=["库存管理"],
    responses={
        400: {"description": "请求参数错误"},
        404: {"description": "资源未找到"},
        500: {"description": "服务器内部错误"}
    }
)


@router.post("/categories", status_code=201, response_model=CategoryResponse, summary="新增分类")
async def add_category(
    request: AddCategoryRequest,
    service: StockService = StockServiceDep,
):
    try:
        category = service.add_category(
            request.name,
            description=request.description,
            parent_category_id=request.parent_category_id,
        )
        return {"success": True, "message": "category added successfully", "category_id": category.category_id}
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"新增分类失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/products", status_code=201, response_model=ProductResponse, summary="新增商品")
async def add_product(
    request: AddProductRequest,
    service: StockService = StockServiceDep,
):
    try:
        product = service.add_product(
            category_id=request.category_id,
            name=request.name,
            base_price=request.base_price,
            stock_quantity=request.stock_quantity,
            sku=request.sku,
            description=request.description,
        )
        return {"success": True, "message": "Product added successfully", "product_id": product.product_id}
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"新增商品失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post(
    "/batch",
    response_model=BatchStockResponse,
    summary="批量查询商品库存",
    description="""批量查询多个商品的库存数量。

    **限制：**
    - 单次最多查询100个商品
    - 不存在的商品库存记为 0
    """,
)
async def batch_get_stocks(
    request: BatchStockQueryRequest = Body(..., description="批量查询请求参数"),
    service: StockService = StockServiceDep,
):
    try:
        stocks = service.batch_get_stocks(request.product_ids)
        return BatchStockResponse(success=True, data=stocks)
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"批量查询库存失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get(
    "/{product_id}",
    response_model=StockResponse,
    summary="查询商品库存",
    description="""查询指定商品的可用库存数量。

    **缓存策略：**
    - 首先查询Redis缓存
    - 缓存未命中则查询数据库
    - 查询结果缓存5分钟，下单与补货后失效
    """,
)
async def get_stock(
    product_id: int = Path(..., gt=0, description="商品ID"),
    service: StockService = StockServiceDep,
):
    try:
        stock = service.get_product_stock(product_id)
        return {"success": True, "product_id": product_id, "available_stock": stock}
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"查询库存失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/{product_id}/restock", response_model=StockResponse, summary="商品补货")
async def restock(
    request: RestockRequest,
    product_id: int = Path(..., gt=0, description="商品ID"),
    service: StockService = StockServiceDep,
):
    try:
        stock = service.restock(product_id, request.quantity)
        return {"success": True, "message": "补货成功", "product_id": product_id, "available_stock": stock}
    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.error(f"补货失败: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
