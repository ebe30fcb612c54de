# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS
In-memory SQLite, fast hashing, no throttling.
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import REST_FRAMEWORK

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

INVOICING_NUMBER_FORMAT = "{prefix}-{year}-{number}"
INVOICING_NUMBER_PADDING = 4
INVOICING_DEFAULT_STAMP_AMOUNT = "1.00"
PAYMENTS_ATOMIC_RECONCILIATION = True
ACCOUNTING_ADJUSTMENT_ACCOUNT_CODE = "9999"
