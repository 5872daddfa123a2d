"""
LocalsZA settings.

Everything environment-specific is read here, once, from ``os.environ``
(populated from ``.env`` by python-dotenv). Apps read ``django.conf.settings``
and never touch the environment themselves.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent.parent

load_dotenv(BASE_DIR / ".env")


def _clean(value) -> str:
    if not value:
        return ""
    return str(value).replace("\r", "").replace("\n", "").strip()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "")
DEBUG = _flag("DEBUG")

ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "orders",
    "payments",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "localsza.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "localsza.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
        "OPTIONS": {"timeout": 30},
    }
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "Africa/Johannesburg"
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
LOGIN_URL = "/admin/login/"

# ========= Email =========
EMAIL_BACKEND = os.getenv("DJANGO_EMAIL_BACKEND", "django.core.mail.backends.smtp.EmailBackend")
EMAIL_HOST = os.getenv("EMAIL_HOST", "localhost")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
EMAIL_USE_TLS = _flag("EMAIL_USE_TLS", "true")
EMAIL_HOST_USER = os.getenv("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = os.getenv("EMAIL_HOST_PASSWORD", "")
EMAIL_TIMEOUT = int(os.getenv("EMAIL_TIMEOUT", "10"))
DEFAULT_FROM_EMAIL = os.getenv("DEFAULT_FROM_EMAIL", "LocalsZA <no-reply@locals-za.co.za>")
EMAIL_FAIL_SILENTLY = _flag("EMAIL_FAIL_SILENTLY", "true")

# ========= PayFast =========
PAYFAST = {
    "MERCHANT_ID": _clean(os.getenv("PAYFAST_MERCHANT_ID")),
    "MERCHANT_KEY": _clean(os.getenv("PAYFAST_MERCHANT_KEY")),
    "PASSPHRASE": _clean(os.getenv("PAYFAST_PASSPHRASE")),
    "RETURN_URL": _clean(os.getenv("PAYFAST_RETURN_URL")),
    "CANCEL_URL": _clean(os.getenv("PAYFAST_CANCEL_URL")),
    "NOTIFY_URL": _clean(os.getenv("PAYFAST_NOTIFY_URL")),
    "SANDBOX": _flag("PAYFAST_TEST_MODE"),
    # Hostnames PayFast sends ITNs from; resolved on every notification.
    "VALID_HOSTS": [
        "www.payfast.co.za",
        "sandbox.payfast.co.za",
        "w1w.payfast.co.za",
        "w2w.payfast.co.za",
    ],
    "VALIDATE_TIMEOUT": float(os.getenv("PAYFAST_VALIDATE_TIMEOUT", "10")),
    "DNS_TIMEOUT": float(os.getenv("PAYFAST_DNS_TIMEOUT", "3")),
    "STORE_NAME": os.getenv("PAYFAST_STORE_NAME", "LocalsZA"),
    "FALLBACK_EMAIL_DOMAIN": os.getenv("PAYFAST_FALLBACK_EMAIL_DOMAIN", "locals-za.co.za"),
}

# ========= Logging =========
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "level": "INFO",
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "payments": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": True,
        },
        "orders": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": True,
        },
        "django": {
            "handlers": ["console"],
            "level": "ERROR",
            "propagate": True,
        },
    },
}
