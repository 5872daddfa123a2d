"""PayFast Instant Transaction Notification (ITN) processing.

An ITN is trusted only after four checks pass, in this order:

1. the body parses into a flat form-encoded map with the required fields,
2. the request comes from an address PayFast's hostnames resolve to,
3. the signature matches the received fields,
4. PayFast's validate endpoint answers ``VALID`` for the exact fields.

Cheap checks run first so hostile traffic never costs a round-trip to the
gateway. Rejections are returned as values, not raised, and every
notification is written to the audit log before the caller responds.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional
from urllib.parse import parse_qsl

import requests

from orders.models import Order

from . import audit
from .allowlist import is_trusted_origin, resolve_hosts
from .config import PayfastConfig
from .signature import SIGNATURE_FIELD, encode_pairs
from .signature import verify as verify_signature

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("m_payment_id", "payment_status", SIGNATURE_FIELD)
RAW_BODY_MAX = 10_000


class Outcome(Enum):
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"
    UNRECOGNIZED = "unrecognized"


STATUS_OUTCOMES = {
    "COMPLETE": Outcome.PAID,
    "FAILED": Outcome.FAILED,
    "CANCELLED": Outcome.CANCELLED,
}


class Rejection(Enum):
    MALFORMED_BODY = ("malformed body", 400)
    INVALID_ORIGIN = ("invalid origin", 400)
    SIGNATURE_MISMATCH = ("signature mismatch", 400)
    SERVER_VALIDATION_FAILED = ("server validation failed", 400)
    UNKNOWN_ORDER = ("unknown order reference", 404)
    # Answered 200 so PayFast stops retrying; resolved out of band
    CONFLICTING_STATE = ("conflicting state", 200)

    def __init__(self, reason, http_status):
        self.reason = reason
        self.http_status = http_status


@dataclass
class NotificationPayload:
    """Fields exactly as received. Unknown extras are kept for the signature and ignored otherwise."""

    fields: dict = field(default_factory=dict)

    def get(self, key: str) -> str:
        return self.fields.get(key) or ""

    @property
    def m_payment_id(self) -> str:
        return self.get("m_payment_id")

    @property
    def payment_status(self) -> str:
        return self.get("payment_status")

    @property
    def pf_payment_id(self) -> str:
        return self.get("pf_payment_id")

    @property
    def signature(self) -> str:
        return self.get(SIGNATURE_FIELD)

    @property
    def amount_gross(self) -> str:
        return self.get("amount_gross")


@dataclass(frozen=True)
class SettlementOutcome:
    kind: Outcome
    order_ref: str
    gateway_transaction_id: str = ""
    payment_status: str = ""
    payload: dict = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class ItnResult:
    outcome: Optional[SettlementOutcome] = None
    rejection: Optional[Rejection] = None
    payload: Optional[NotificationPayload] = field(default=None, compare=False)
    verified: bool = False

    @property
    def ok(self) -> bool:
        return self.rejection is None


def parse_itn_body(raw_body) -> Optional[NotificationPayload]:
    """Decode a form-encoded ITN body; ``None`` when it is not a usable flat map."""
    if isinstance(raw_body, (bytes, bytearray)):
        try:
            text = bytes(raw_body).decode("utf-8")
        except UnicodeDecodeError:
            return None
    else:
        text = raw_body or ""
    # Stray separators carry no fields
    text = "&".join(segment for segment in text.strip().split("&") if segment)
    if not text:
        return None

    try:
        # parse_qsl turns '+' into a space before percent-decoding
        pairs = parse_qsl(text, keep_blank_values=True, strict_parsing=True, errors="strict")
    except ValueError:
        return None

    fields = {}
    for key, value in pairs:
        if key in fields:
            return None
        fields[key] = value

    if any(not fields.get(k) for k in REQUIRED_FIELDS):
        return None
    return NotificationPayload(fields=fields)


def outcome_for(payload: NotificationPayload) -> SettlementOutcome:
    status = payload.payment_status.strip()
    return SettlementOutcome(
        kind=STATUS_OUTCOMES.get(status, Outcome.UNRECOGNIZED),
        order_ref=payload.m_payment_id,
        gateway_transaction_id=payload.pf_payment_id,
        payment_status=status,
        payload=dict(payload.fields),
    )


def validate_with_payfast(payload: NotificationPayload, config: PayfastConfig) -> bool:
    """Ask PayFast whether it vouches for this exact notification."""
    body = encode_pairs(payload.fields.items())
    headers = {
        "Content-Type": "application/x-www-form-urlencoded",
        "User-Agent": f"{config.store_name} Payment Processor",
    }
    try:
        r = requests.post(config.validate_url, data=body, headers=headers, timeout=config.validate_timeout)
    except requests.RequestException:
        logger.exception("PayFast validation request failed for m_payment_id=%s", payload.m_payment_id)
        return False

    valid = r.status_code == 200 and (r.text or "").strip() == "VALID"
    if not valid:
        logger.warning(
            "PayFast validation rejected m_payment_id=%s: status=%s text=%s",
            payload.m_payment_id,
            r.status_code,
            (r.text or "")[:200],
        )
    return valid


class NotificationProcessor:
    def __init__(self, config: PayfastConfig, resolver=None):
        self.config = config
        self.resolver = resolver or resolve_hosts

    def process(self, raw_body, source_ip: str) -> ItnResult:
        result = self._evaluate(raw_body, source_ip)

        if isinstance(raw_body, (bytes, bytearray)):
            raw_text = bytes(raw_body).decode("utf-8", errors="replace")
        else:
            raw_text = raw_body or ""

        audit.record(
            result.payload.fields if result.payload else {},
            verified=result.verified,
            source_ip=source_ip,
            environment=self.config.environment,
            raw_body=raw_text[:RAW_BODY_MAX],
            rejection_reason=result.rejection.reason if result.rejection else "",
        )
        return result

    def _reject(self, rejection: Rejection, payload=None, verified=False) -> ItnResult:
        logger.warning(
            "PayFast ITN rejected (%s) m_payment_id=%s",
            rejection.reason,
            payload.m_payment_id if payload else "",
        )
        return ItnResult(rejection=rejection, payload=payload, verified=verified)

    def _evaluate(self, raw_body, source_ip: str) -> ItnResult:
        payload = parse_itn_body(raw_body)
        if payload is None:
            return self._reject(Rejection.MALFORMED_BODY)

        logger.info(
            "PayFast ITN received m_payment_id=%s payment_status=%s pf_payment_id=%s from %s",
            payload.m_payment_id,
            payload.payment_status,
            payload.pf_payment_id,
            source_ip,
        )

        if not is_trusted_origin(
            source_ip, self.config.valid_hosts, self.config.dns_timeout, resolver=self.resolver
        ):
            return self._reject(Rejection.INVALID_ORIGIN, payload)

        if not verify_signature(payload.fields, payload.signature, self.config.passphrase):
            return self._reject(Rejection.SIGNATURE_MISMATCH, payload)

        if not validate_with_payfast(payload, self.config):
            return self._reject(Rejection.SERVER_VALIDATION_FAILED, payload)

        order = Order.objects.filter(pk=payload.m_payment_id).first()
        if order is None:
            return self._reject(Rejection.UNKNOWN_ORDER, payload, verified=True)

        self._check_amount(order, payload)
        return ItnResult(outcome=outcome_for(payload), payload=payload, verified=True)

    def _check_amount(self, order, payload: NotificationPayload) -> None:
        # Reported only; settlement does not depend on it (see DESIGN.md)
        if not payload.amount_gross:
            return
        try:
            paid = Decimal(payload.amount_gross)
        except InvalidOperation:
            paid = None
        if paid is None or not paid.is_finite():
            logger.warning(
                "PayFast ITN for %s has unparseable amount_gross=%r", order.pk, payload.amount_gross
            )
            return
        if paid != order.total:
            logger.warning(
                "PayFast ITN amount mismatch for %s: amount_gross=%s order total=%s",
                order.pk,
                paid,
                order.total,
            )
