"""库存 / 商品目录 API 的 Pydantic 模型"""

from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# ==================== 请求模型 ====================

class AddCategoryRequest(BaseModel):
    """新增分类请求"""
    name: str = Field(..., min_length=1, max_length=100, description="分类名称")
    description: Optional[str] = Field(None, description="分类描述")
    parent_category_id: Optional[int] = Field(None, gt=0, description="父分类ID")


class AddProductRequest(BaseModel):
    """新增商品请求"""
    category_id: int = Field(..., gt=0, description="分类ID")
    name: str = Field(..., min_length=1, max_length=255, description="商品名称")
    base_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="基础售价")
    stock_quantity: int = Field(..., ge=0, description="初始库存")
    sku: str = Field(..., min_length=1, max_length=50, description="商品唯一SKU")
    description: Optional[str] = Field(None, description="商品描述")


class RestockRequest(BaseModel):
    """补货请求"""
    quantity: int = Field(..., gt=0, description="补货数量")


class BatchStockQueryRequest(BaseModel):
    """批量查询库存请求"""
    product_ids: List[int] = Field(
        ...,
        min_length=1,
        max_length=100,
        description="商品ID列表",
    )


# ==================== 响应模型 ====================

class BaseResponse(BaseModel):
    """基础响应模型"""
    success: bool = Field(..., description="请求是否成功")
    message: Optional[str] = Field(None, description="响应消息")


class CategoryResponse(BaseResponse):
    category_id: int


class ProductResponse(BaseResponse):
    product_id: int


class StockResponse(BaseResponse):
    """单个商品库存响应"""
    product_id: int = Field(..., description="商品ID")
    available_stock: int = Field(..., ge=0, description="可用库存数量")


class BatchStockResponse(BaseResponse):
    """批量库存查询响应"""
    data: Dict[int, int] = Field(..., description="商品ID到库存数量的映射")
