"""库存与商品目录服务"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from redis import Redis, RedisError
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.exceptions import ConflictError, NotFound, ReferenceNotFound
from storefront.core.id_generator import next_id
from storefront.core.redis import stock_cache_key
from storefront.db.session import unit_of_work
from storefront.models.product import Category, Product

logger = logging.getLogger(__name__)

# 缓存故障只降级为查库
CACHE_ERRORS = (RedisError, OSError)


class StockService:
    """库存核心服务类"""

    def __init__(self, db: Session, redis: Optional[Redis] = None):
        self.db = db
        self.redis = redis

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """条件扣减库存：仅当库存 >= quantity 时扣减

        单条 UPDATE ... WHERE stock_quantity >= :quantity，依据影响行数判断成功，
        并发扣减同一商品时不会丢失更新，也不会扣成负数。
        不提交事务，由调用方的事务边界负责。
        """
        result = self.db.execute(
            update(Product)
            .where(
                Product.product_id == product_id,
                Product.stock_quantity >= quantity,
            )
            .values(stock_quantity=Product.stock_quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def get_product_stock(self, product_id: int) -> int:
        """查询商品可用库存（带缓存，Redis 不可用时直接查库）"""
        cache_key = stock_cache_key(product_id)

        # 先查缓存
        if self.redis:
            try:
                cached = self.redis.get(cache_key)
            except CACHE_ERRORS as e:
                logger.warning(f"⚠️  Cache read failed for product {product_id}: {e}")
                cached = None
            if cached is not None:
                logger.debug(f"Cache hit for product {product_id}")
                return int(cached)

        # 缓存未命中，查询数据库
        stock = self.db.execute(
            select(Product.stock_quantity).where(Product.product_id == product_id)
        ).scalar_one_or_none()
        if stock is None:
            raise NotFound(f"Product ID {product_id} not found")

        if self.redis:
            try:
                self.redis.setex(cache_key, settings.STOCK_CACHE_TTL, stock)
                logger.debug(f"Cache set for product {product_id}: {stock}")
            except CACHE_ERRORS as e:
                logger.warning(f"⚠️  Cache write failed for product {product_id}: {e}")

        return stock

    def batch_get_stocks(self, product_ids: List[int]) -> dict:
        """批量获取库存（带缓存优化），不存在的商品记为 0"""
        if not product_ids:
            return {}

        results = {}
        uncached_ids = list(product_ids)

        if self.redis:
            try:
                cached_values = self.redis.mget([stock_cache_key(pid) for pid in product_ids])
            except CACHE_ERRORS as e:
                logger.warning(f"⚠️  Batch cache read failed: {e}")
                cached_values = [None] * len(product_ids)
            uncached_ids = []
            for pid, cached in zip(product_ids, cached_values):
                if cached is not None:
                    results[pid] = int(cached)
                else:
                    uncached_ids.append(pid)

        if uncached_ids:
            rows = self.db.execute(
                select(Product.product_id, Product.stock_quantity)
                .where(Product.product_id.in_(uncached_ids))
            ).all()
            stock_map = {row.product_id: row.stock_quantity for row in rows}
            for pid in uncached_ids:
                results[pid] = stock_map.get(pid, 0)

            if self.redis:
                try:
                    pipe = self.redis.pipeline()
                    for pid in uncached_ids:
                        pipe.setex(stock_cache_key(pid), settings.STOCK_CACHE_TTL, results[pid])
                    pipe.execute()
                except CACHE_ERRORS as e:
                    logger.warning(f"⚠️  Batch cache write failed: {e}")

        return results

    def invalidate_cache(self, product_ids: Iterable[int]) -> None:
        """失效商品库存缓存（缓存失败不影响业务）"""
        ids = list(product_ids)
        if not self.redis or not ids:
            return
        try:
            self.redis.delete(*[stock_cache_key(pid) for pid in ids])
            logger.debug(f"Cache invalidated for products {ids}")
        except CACHE_ERRORS as e:
            logger.warning(f"⚠️  Cache invalidation failed: {e}")

    def restock(self, product_id: int, quantity: int) -> int:
        """补货：增加库存并返回最新库存"""
        with unit_of_work(self.db):
            result = self.db.execute(
                update(Product)
                .where(Product.product_id == product_id)
                .values(stock_quantity=Product.stock_quantity + quantity)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFound(f"Product ID {product_id} not found")
            stock = self.db.execute(
                select(Product.stock_quantity).where(Product.product_id == product_id)
            ).scalar_one()

        logger.info(f"补货成功: product_id={product_id}, quantity={quantity}, stock={stock}")
        self.invalidate_cache([product_id])
        return stock

    def add_category(
        self,
        name: str,
        description: Optional[str] = None,
        parent_category_id: Optional[int] = None,
    ) -> Category:
        try:
            with unit_of_work(self.db):
                if parent_category_id is not None and self.db.get(Category, parent_category_id) is None:
                    raise ReferenceNotFound(f"Parent category ID {parent_category_id} not found")
                category = Category(
                    category_id=next_id(),
                    name=name,
                    description=description,
                    parent_category_id=parent_category_id,
                )
                self.db.add(category)
        except IntegrityError:
            raise ConflictError(f"Category '{name}' already exists")
        logger.info(f"新增分类: category_id={category.category_id}, name={name}")
        return category

    def add_product(
        self,
        category_id: int,
        name: str,
        base_price: Decimal,
        stock_quantity: int,
        sku: str,
        description: Optional[str] = None,
    ) -> Product:
        try:
            with unit_of_work(self.db):
                if self.db.get(Category, category_id) is None:
                    raise ReferenceNotFound(f"Category ID {category_id} not found")
                product = Product(
                    product_id=next_id(),
                    category_id=category_id,
                    name=name,
                    description=description or "",
                    base_price=base_price,
                    stock_quantity=stock_quantity,
                    sku=sku,
                )
                self.db.add(product)
        except IntegrityError:
            raise ConflictError(f"Product with SKU '{sku}' already exists")
        logger.info(f"新增商品: product_id={product.product_id}, sku={sku}, stock={stock_quantity}")
        return product
