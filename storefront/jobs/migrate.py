"""数据库表结构初始化脚本"""

import argparse
import logging

from storefront.db import drop_db, init_db
from storefront.db.session import engine

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def run_migrate(drop_first: bool = False, bind=None):
    """创建全部数据表

    Args:
        drop_first: 是否先删除已有数据表（会清空数据）
        bind: 数据库引擎，默认使用配置中的引擎
    """
    bind = bind or engine
    if drop_first:
        logger.warning("删除全部数据表...")
        drop_db(bind)
    init_db(bind)
    logger.info("数据表创建完成")


def main(argv=None):
    """主函数"""
    parser = argparse.ArgumentParser(description='Storefront 数据库初始化工具')
    parser.add_argument(
        '--drop-first',
        action='store_true',
        help='先删除已有数据表再创建'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='详细输出模式（打印 SQL）'
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger('sqlalchemy.engine').setLevel(logging.INFO)

    try:
        run_migrate(drop_first=args.drop_first)
        print("✅ 数据表已就绪")
    except Exception as e:
        logger.error(f"初始化失败: {str(e)}")
        print(f"❌ 执行失败: {str(e)}")
        return 1

    return 0

if __name__ == "__main__":
    exit(main())
