import logging
from dataclasses import dataclass
from decimal import Decimal

from .config import PayfastConfig
from .exceptions import ConfigurationError, ValidationError
from .signature import SIGNATURE_FIELD, sign
from .utils import amount_str, is_valid_email, za_cell_number

logger = logging.getLogger(__name__)

NAME_MAX = 100
TEXT_MAX = 255

# Outbound field order. Optional fields are only present when they carry a value
# and the signature always comes last.
REQUEST_FIELDS = (
    "merchant_id",
    "merchant_key",
    "return_url",
    "cancel_url",
    "notify_url",
    "name_first",
    "name_last",
    "email_address",
    "cell_number",
    "m_payment_id",
    "amount",
    "item_name",
    "item_description",
    "custom_str1",
    SIGNATURE_FIELD,
)


@dataclass(frozen=True)
class PaymentRequestDescriptor:
    target_url: str
    fields: dict
    payment_id: str

    def as_dict(self) -> dict:
        return {"url": self.target_url, "formData": dict(self.fields), "paymentId": self.payment_id}


def split_name(full_name: str):
    parts = (full_name or "").split()
    first = parts[0] if parts else "Customer"
    last = " ".join(parts[1:]) or "User"
    return first[:NAME_MAX], last[:NAME_MAX]


def build_payment_request(config: PayfastConfig, order, order_id: str, user_id: str) -> PaymentRequestDescriptor:
    """Assemble and sign the form PayFast's hosted page expects for ``order``.

    Raises :class:`ConfigurationError` without merchant credentials and
    :class:`ValidationError` for a non-positive total or a missing reference.
    Nothing is written to the order; the caller records the initiation.
    """
    if config is None or not config.merchant_id or not config.merchant_key:
        raise ConfigurationError("PayFast merchant credentials not configured")
    if not order_id:
        raise ValidationError("Missing order reference")

    amount = amount_str(order.total)
    if Decimal(amount) <= 0:
        raise ValidationError("Invalid order amount")

    user_id = str(user_id or "guest")
    first_name, last_name = split_name(order.delivery_name)

    email = (order.email or "").strip()
    if not is_valid_email(email):
        email = f"{user_id}@{config.fallback_email_domain}"

    cell_number = za_cell_number(order.delivery_phone)

    values = {
        "merchant_id": config.merchant_id,
        "merchant_key": config.merchant_key,
        "return_url": f"{config.return_url}/{order_id}",
        "cancel_url": f"{config.cancel_url}/{order_id}",
        "notify_url": config.notify_url,
        "name_first": first_name,
        "name_last": last_name,
        "email_address": email[:TEXT_MAX],
        "m_payment_id": order_id,
        "amount": amount,
        "item_name": f"{config.store_name} Order {order_id[-8:]}"[:NAME_MAX],
        "item_description": f"{order.item_count or 0} items from {config.store_name}"[:TEXT_MAX],
    }
    if len(cell_number) >= 10:
        values["cell_number"] = cell_number
    if user_id != "guest":
        values["custom_str1"] = user_id[:TEXT_MAX]

    fields = {name: values[name] for name in REQUEST_FIELDS if name in values}
    fields[SIGNATURE_FIELD] = sign(fields, config.passphrase)

    logger.info(
        "PayFast payment request created order_id=%s amount=%s environment=%s",
        order_id,
        amount,
        config.environment,
    )
    return PaymentRequestDescriptor(target_url=config.process_url, fields=fields, payment_id=order_id)
