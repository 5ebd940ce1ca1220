"""邮件通知服务

EmailSender 负责真正的 SMTP 投递（在 Celery worker 中执行）；
EmailDispatcher 在请求进程中把发送任务投递到 notification 队列。
两者对外暴露同一个 ``send(sender, to, subject, html)`` 接口。
"""

import logging
import smtplib
from datetime import datetime, timedelta
from decimal import Decimal
from email.message import EmailMessage
from html import escape
from typing import List, Optional, Protocol

from storefront.core.config import settings

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send(self, sender: str, to: str, subject: str, html: str) -> dict:
        ...


class EmailSender:
    """SMTP 邮件发送"""

    def __init__(
        self,
        host: str = settings.SMTP_HOST,
        port: int = settings.SMTP_PORT,
        user: str = settings.SMTP_USER,
        password: str = settings.SMTP_PASSWORD,
        starttls: bool = settings.SMTP_STARTTLS,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.starttls = starttls

    def send(self, sender: str, to: str, subject: str, html: str) -> dict:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = sender
        msg["To"] = to
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")

        with smtplib.SMTP(self.host, self.port, timeout=10) as server:
            if self.starttls:
                server.starttls()
            if self.user:
                server.login(self.user, self.password)
            server.send_message(msg)

        logger.info(f"Email sent: to={to}, subject={subject}")
        return {"status": "sent", "to": to}


class EmailDispatcher:
    """将邮件发送投递为 Celery 异步任务"""

    def send(self, sender: str, to: str, subject: str, html: str) -> dict:
        from tasks.notification_tasks import send_email

        task = send_email.delay(sender, to, subject, html)
        logger.info(f"Email queued: to={to}, task_id={task.id}")
        return {"id": task.id, "status": "queued"}


def notify_safely(notifier: Notifier, to: Optional[str], subject: str, html: str) -> Optional[dict]:
    """尽力发送通知：失败只记录日志，不向调用方抛出"""
    if not to:
        logger.warning(f"No recipient for notification '{subject}', skipped")
        return None
    try:
        return notifier.send(settings.MAIL_FROM, to, subject, html)
    except Exception as e:
        logger.error(f"Notification failed: to={to}, subject={subject}, error={e}")
        return {"error": str(e)}


# ==================== 邮件模板 ====================

def format_date(value: datetime) -> str:
    """格式化为 'March 5, 2025'"""
    return f"{value:%B} {value.day}, {value.year}"


def _money(value: Decimal) -> str:
    return f"${value:.2f}"


def render_order_confirmation(
    order_id: int,
    order_time: datetime,
    lines: List[dict],
    subtotal: Decimal,
    tax: Decimal,
    total: Decimal,
    delivery_days: int = settings.DELIVERY_DAYS,
) -> str:
    """订单确认邮件

    lines: [{"name", "quantity", "unit_price", "subtotal"}, ...]
    """
    estimated = order_time + timedelta(days=delivery_days)
    rows = "".join(
        "<tr>"
        f"<td>{escape(str(line['name']))}</td>"
        f"<td style=\"text-align: center;\">{line['quantity']}</td>"
        f"<td style=\"text-align: right;\">{_money(line['unit_price'])}</td>"
        f"<td style=\"text-align: right;\">{_money(line['subtotal'])}</td>"
        "</tr>"
        for line in lines
    )
    return f"""<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>Payment Successful - Order Confirmation</title></head>
<body style="font-family: Arial, sans-serif; color: #333;">
  <h1 style="color: #4CAF50;">Payment Successful!</h1>
  <p>Thank you for your purchase. Your order has been confirmed.</p>
  <p>Order number: <strong>{order_id}</strong></p>
  <p>Order date: <strong>{format_date(order_time)}</strong></p>
  <p>Estimated delivery: <strong>{format_date(estimated)}</strong></p>
  <h2>Order Summary</h2>
  <table width="100%" cellpadding="5" cellspacing="0">
    <tr><th align="left">Product</th><th>Qty</th><th align="right">Price</th><th align="right">Subtotal</th></tr>
    {rows}
  </table>
  <table width="100%" cellpadding="5" cellspacing="0">
    <tr><td>Subtotal</td><td style="text-align: right;">{_money(subtotal)}</td></tr>
    <tr><td>Tax</td><td style="text-align: right;">{_money(tax)}</td></tr>
    <tr><td><strong>Total</strong></td><td style="text-align: right;"><strong>{_money(total)}</strong></td></tr>
  </table>
</body>
</html>"""


def render_status_update(order_id: int, status: str, comment: Optional[str] = None) -> str:
    note = f"<p>{escape(comment)}</p>" if comment else ""
    return f"""<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>Order Update</title></head>
<body style="font-family: Arial, sans-serif; color: #333;">
  <h1>Your order has been updated</h1>
  <p>Order number: <strong>{order_id}</strong></p>
  <p>New status: <strong>{escape(status.capitalize())}</strong></p>
  {note}
</body>
</html>"""
