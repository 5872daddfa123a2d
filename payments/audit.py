import ipaddress
import logging

from .models import PaymentNotification

logger = logging.getLogger(__name__)


def _ip_or_none(value):
    try:
        return str(ipaddress.ip_address((value or "").strip()))
    except ValueError:
        return None


def record(payload, verified: bool, source_ip: str, environment: str, *, raw_body: str = "", rejection_reason: str = "") -> PaymentNotification:
    """Persist one received ITN before the gateway gets its answer.

    The write is synchronous: the view only responds once this returns, so a
    crash after verification cannot lose the record.
    """
    payload = dict(payload or {})
    entry = PaymentNotification.objects.create(
        order_ref=(payload.get("m_payment_id") or "")[:100],
        payment_status=(payload.get("payment_status") or "")[:32],
        gateway_transaction_id=(payload.get("pf_payment_id") or "")[:64],
        payload=payload,
        raw_body=raw_body,
        source_ip=_ip_or_none(source_ip),
        verified=verified,
        rejection_reason=rejection_reason,
        environment=environment,
    )
    logger.debug("Recorded PayFast ITN id=%s verified=%s", entry.pk, verified)
    return entry
