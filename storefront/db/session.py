from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from storefront.core.config import settings

engine = create_engine(
    settings.database_url,
    pool_size=10,
    max_overflow=20,
    pool_pre_ping=True,
    pool_recycle=1800,
)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """事务边界：正常退出提交，任何异常回滚后继续抛出"""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
