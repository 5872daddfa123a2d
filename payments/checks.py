from django.conf import settings
from django.core.checks import Error, register


@register()
def payfast_credentials_check(app_configs, **kwargs):
    conf = getattr(settings, "PAYFAST", None) or {}
    missing = [k for k in ("MERCHANT_ID", "MERCHANT_KEY") if not (conf.get(k) or "").strip()]
    if not missing:
        return []
    return [
        Error(
            f"PayFast setting(s) missing: {', '.join(missing)}",
            hint="Set PAYFAST_MERCHANT_ID and PAYFAST_MERCHANT_KEY in the environment or .env.",
            id="payments.E001",
        )
    ]
