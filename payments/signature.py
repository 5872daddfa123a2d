"""PayFast parameter strings and MD5 signatures.

PayFast signs the URL-encoded parameter string with MD5. Keys are sorted,
blank values are dropped, values are percent-encoded the way JavaScript's
``encodeURIComponent`` does it and spaces become ``+``. A configured
passphrase is appended as a final ``passphrase=`` pair. Both sides of the
integration (checkout and ITN) must build byte-identical strings, so every
caller goes through :func:`canonical_encode`.
"""

import hashlib
import hmac
from urllib.parse import quote

SIGNATURE_FIELD = "signature"

# Characters encodeURIComponent leaves alone (quote() already keeps alnum)
_SAFE = "-_.!~*'()"


def _quote(value: str) -> str:
    return quote(value, safe=_SAFE).replace("%20", "+")


def encode_pairs(pairs) -> str:
    """Encode ``(key, value)`` pairs in the order given."""
    return "&".join(f"{_quote(str(k))}={_quote(str(v))}" for k, v in pairs)


def canonical_encode(params: dict) -> str:
    pairs = []
    for key in sorted(params):
        value = params[key]
        if value is None:
            continue
        value = str(value).strip()
        if value:
            pairs.append((key, value))
    return encode_pairs(pairs)


def sign(params: dict, passphrase: str = "") -> str:
    """Return the lowercase hex MD5 digest PayFast expects for ``params``."""
    payload = canonical_encode(params)
    passphrase = (passphrase or "").strip()
    if passphrase:
        suffix = encode_pairs([("passphrase", passphrase)])
        payload = f"{payload}&{suffix}" if payload else suffix
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


def verify(params: dict, claimed: str, passphrase: str = "") -> bool:
    """Check ``claimed`` against every received field except ``signature`` itself."""
    if not claimed:
        return False
    fields = {k: v for k, v in params.items() if k != SIGNATURE_FIELD}
    expected = sign(fields, passphrase)
    return hmac.compare_digest(expected.encode("ascii"), str(claimed).strip().encode("utf-8"))
