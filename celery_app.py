"""Celery 配置文件"""

from celery import Celery

from storefront.core.config import settings

# 创建 Celery 应用实例
app = Celery('storefront_worker', include=['tasks.notification_tasks'])

# 配置 Redis 作为 broker 和 backend
app.conf.broker_url = settings.broker_url
app.conf.result_backend = settings.result_backend

# 任务序列化配置
app.conf.task_serializer = 'json'
app.conf.result_serializer = 'json'
app.conf.accept_content = ['json']

app.conf.timezone = 'UTC'
app.conf.enable_utc = True

# 任务路由配置
app.conf.task_routes = {
    'tasks.notification.*': {'queue': 'notification'},
}

# Worker 配置
app.conf.worker_prefetch_multiplier = 1
app.conf.task_acks_late = True

# 导出应用实例
__all__ = ['app']
