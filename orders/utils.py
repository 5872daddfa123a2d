import secrets
import string

from django.utils import timezone

ALNUM = string.ascii_uppercase + string.digits


def generate_order_id(prefix="ORD"):
    ts = timezone.now().strftime("%m%d%H%M%S")  # 10 chars
    rand = "".join(secrets.choice(ALNUM) for _ in range(6))
    # Gateway references stay under 21 alnum chars
    return f"{prefix}{ts}{rand}"[-20:]
