from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse
from sqlalchemy import text

from storefront.core.config import settings
from storefront.core.exceptions import StorefrontError
from storefront.core.redis import redis_client
from storefront.db.session import engine
from storefront.routers import cart_router, order_router, payment_method_router, stock_router

import uvicorn

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...")

    # 数据库连接检查
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        logger.info("✅ Database connection successful")
    except Exception as e:
        logger.error("❌ Database connection failed: %s", e)
        raise

    # Redis 连接检查（仅用于库存缓存，失败不阻止启动）
    try:
        redis_client.ping()
        logger.info("✅ Redis connected successfully")
    except Exception as e:
        logger.warning(f"⚠️  Redis connection failed: {e}")
        logger.warning("⚠️  Application will run without stock caching")

    yield

    logger.info("Shutting down application...")

# 创建 FastAPI 应用
app = FastAPI(
    title="Storefront API",
    description="电商后端：购物车、结算下单、订单与库存管理",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
)

# 注册路由
app.include_router(cart_router.router, prefix="/api/v1")
app.include_router(order_router.router, prefix="/api/v1")
app.include_router(stock_router.router, prefix="/api/v1")
app.include_router(payment_method_router.router, prefix="/api/v1")


def error_response(status_code: int, issues: list) -> JSONResponse:
    """统一错误响应格式 {"error": {"issues": [{"code", "message"}]}}"""
    return JSONResponse(status_code=status_code, content={"error": {"issues": issues}})


# 全局异常处理
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error: {exc}")
    issues = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        message = f"{field}: {err.get('msg')}" if field else err.get("msg")
        issues.append({"code": "invalid_request", "message": message})
    return error_response(400, issues)

@app.exception_handler(StorefrontError)
async def storefront_exception_handler(request: Request, exc: StorefrontError):
    logger.error(f"Business error: {exc.status_code} - {exc.code} - {exc.message}")
    return error_response(exc.status_code, [exc.to_issue()])

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    logger.error(f"HTTP error: {exc.status_code} - {exc.detail}")
    if exc.status_code >= 500:
        code = "internal_server_error"
    elif exc.status_code == 404:
        code = "not_found"
    else:
        code = "bad_request"
    return error_response(exc.status_code, [{"code": code, "message": str(exc.detail)}])

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return error_response(500, [{"code": "internal_server_error", "message": "Internal server error"}])

# 健康检查端点
@app.get("/health")
async def health_check():
    """健康检查接口"""
    return {
        "status": "healthy",
        "service": "storefront",
        "version": "1.0.0"
    }

@app.get("/")
async def read_root():
    """API 根路径"""
    return {
        "message": "Storefront API",
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    uvicorn.run(
        "storefront.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
