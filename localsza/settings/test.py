from .base import *

DEBUG = False

SECRET_KEY = 'test-secret-key'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

ALLOWED_HOSTS = ['testserver']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

PAYFAST = {
    **PAYFAST,
    "MERCHANT_ID": "10000100",
    "MERCHANT_KEY": "46f0cd694581a",
    "PASSPHRASE": "",
    "RETURN_URL": "https://shop.example.com/order-confirmation",
    "CANCEL_URL": "https://shop.example.com/payment-cancelled",
    "NOTIFY_URL": "https://api.example.com/payment/notify",
    "SANDBOX": True,
}
