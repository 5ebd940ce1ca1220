from .base import Base
from .session import engine, SessionLocal, unit_of_work


def init_db(bind=None):
    """创建全部数据表"""
    # 导入模型以注册到 Base.metadata
    import storefront.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def drop_db(bind=None):
    import storefront.models  # noqa: F401

    Base.metadata.drop_all(bind=bind or engine)


# Export for convenience
__all__ = ["Base", "engine", "SessionLocal", "unit_of_work", "init_db", "drop_db"]
