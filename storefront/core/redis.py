"""Redis 客户端配置模块"""

from redis import Redis

from storefront.core.config import settings

REDIS_URL = settings.redis_url

# 基础 Redis 客户端（库存缓存）
redis_client = Redis.from_url(REDIS_URL, decode_responses=True)


def stock_cache_key(product_id: int) -> str:
    """商品可用库存的缓存键"""
    return f"stock:available:{product_id}"


# 导出
__all__ = [
    "redis_client",
    "stock_cache_key",
    "REDIS_URL"
]
