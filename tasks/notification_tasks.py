"""通知相关的 Celery 任务"""

import logging
import smtplib

from celery_app import app
from storefront.services.notification_service import EmailSender

logger = logging.getLogger(__name__)


@app.task(
    name='tasks.notification.send_email',
    bind=True,
    max_retries=3,
    default_retry_delay=30,
)
def send_email(self, sender: str, to: str, subject: str, html: str):
    """发送一封事务邮件

    Args:
        sender: 发件人
        to: 收件人
        subject: 主题
        html: HTML 正文

    Returns:
        发送结果
    """
    try:
        return EmailSender().send(sender, to, subject, html)
    except (smtplib.SMTPException, OSError) as e:
        logger.warning(f"邮件发送失败，准备重试: to={to}, error={e}")
        raise self.retry(exc=e)


# 导出任务
__all__ = [
    'send_email',
]
