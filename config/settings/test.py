# config/settings/test.py
from .base import *  # noqa

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

CLINIC_ADMIN = {**CLINIC_ADMIN, "PUBLIC_BOOKING_ENABLED": True}

LOGGING["loggers"]["clinic_core"]["level"] = "DEBUG"
# let pytest's caplog see application records
LOGGING["loggers"]["clinic_core"]["propagate"] = True
