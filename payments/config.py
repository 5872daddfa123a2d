from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver

from .exceptions import ConfigurationError

SANDBOX_HOST = "https://sandbox.payfast.co.za"
PRODUCTION_HOST = "https://www.payfast.co.za"


@dataclass(frozen=True)
class PayfastConfig:
    """Merchant settings for one process, built once and handed to the builder and processor."""

    merchant_id: str
    merchant_key: str
    passphrase: str = ""
    return_url: str = ""
    cancel_url: str = ""
    notify_url: str = ""
    sandbox: bool = False
    valid_hosts: Tuple[str, ...] = ()
    validate_timeout: float = 10.0
    dns_timeout: float = 3.0
    store_name: str = "LocalsZA"
    fallback_email_domain: str = "locals-za.co.za"

    @classmethod
    def from_settings(cls, conf: Optional[dict] = None) -> "PayfastConfig":
        conf = settings.PAYFAST if conf is None else conf
        merchant_id = (conf.get("MERCHANT_ID") or "").strip()
        merchant_key = (conf.get("MERCHANT_KEY") or "").strip()
        if not merchant_id or not merchant_key:
            raise ConfigurationError("PayFast merchant credentials not configured")
        return cls(
            merchant_id=merchant_id,
            merchant_key=merchant_key,
            passphrase=(conf.get("PASSPHRASE") or "").strip(),
            return_url=(conf.get("RETURN_URL") or "").rstrip("/"),
            cancel_url=(conf.get("CANCEL_URL") or "").rstrip("/"),
            notify_url=conf.get("NOTIFY_URL") or "",
            sandbox=bool(conf.get("SANDBOX")),
            valid_hosts=tuple(conf.get("VALID_HOSTS") or ()),
            validate_timeout=float(conf.get("VALIDATE_TIMEOUT", 10)),
            dns_timeout=float(conf.get("DNS_TIMEOUT", 3)),
            store_name=conf.get("STORE_NAME") or "LocalsZA",
            fallback_email_domain=conf.get("FALLBACK_EMAIL_DOMAIN") or "locals-za.co.za",
        )

    @property
    def environment(self) -> str:
        return "sandbox" if self.sandbox else "production"

    @property
    def process_url(self) -> str:
        return (SANDBOX_HOST if self.sandbox else PRODUCTION_HOST) + "/eng/process"

    @property
    def validate_url(self) -> str:
        return (SANDBOX_HOST if self.sandbox else PRODUCTION_HOST) + "/eng/query/validate"


@lru_cache(maxsize=None)
def get_config() -> PayfastConfig:
    """The process-wide configuration; raises ConfigurationError until credentials are set."""
    return PayfastConfig.from_settings()


@receiver(setting_changed)
def _reset_config(*, setting, **kwargs):
    if setting == "PAYFAST":
        get_config.cache_clear()
