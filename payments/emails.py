import logging

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)

STATUS_SUBJECTS = {
    "pending": "Payment received for order {order_id}",
    "payment_failed": "Payment failed for order {order_id}",
    "cancelled": "Payment cancelled for order {order_id}",
}


def _fail_silently() -> bool:
    return getattr(settings, "EMAIL_FAIL_SILENTLY", True)


def send_order_status_email(*, order) -> bool:
    """Tell the customer their order's payment settled. Returns False when nothing was sent."""
    if not order.email:
        logger.info("Order %s has no email address; skipping status email", order.pk)
        return False
    subject = STATUS_SUBJECTS.get(order.status, "Update on order {order_id}").format(order_id=order.pk)
    body = render_to_string("payments/email/order_status.txt", {"order": order})
    sent = send_mail(
        subject,
        body,
        settings.DEFAULT_FROM_EMAIL,
        [order.email],
        fail_silently=_fail_silently(),
    )
    return bool(sent)
