"""
Django settings for the SaveBite marketplace core.

Only the pieces the data layer needs are configured: the cache framework
(store backend), password hashers, Django REST framework (input validation)
and logging. There are no models, so DATABASES is left empty.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    raise ValueError("SECRET_KEY environment variable must be set")

DEBUG = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")

INSTALLED_APPS = [
    "rest_framework",
    "authentication",
    "marketplace",
    "activity",
]

DATABASES = {}

USE_TZ = True
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")

# ==============================================================================
# CACHE (backs the key-value store)
# ==============================================================================

REDIS_URL = os.getenv("REDIS_URL")

if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": REDIS_URL,
            "KEY_PREFIX": "savebite",
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "savebite-store",
        }
    }

# ==============================================================================
# PASSWORDS
# ==============================================================================

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.PBKDF2PasswordHasher",
    "django.contrib.auth.hashers.PBKDF2SHA1PasswordHasher",
]

# ==============================================================================
# INFRASTRUCTURE
# ==============================================================================

INFRASTRUCTURE = {
    # "cache" persists through Django's cache framework, "memory" keeps
    # everything in-process (lost on restart).
    "STORE_BACKEND": os.getenv("STORE_BACKEND", "cache"),
    "STORE_CACHE_ALIAS": os.getenv("STORE_CACHE_ALIAS", "default"),
}

# ==============================================================================
# SAVEBITE BUSINESS RULES
# ==============================================================================

SAVEBITE = {
    "TAX_RATE": os.getenv("SAVEBITE_TAX_RATE", "0.08"),
    "SESSION_TTL_DAYS": int(os.getenv("SAVEBITE_SESSION_TTL_DAYS", "7")),
    "PERSIST_EXPIRY_ON_READ": os.getenv("SAVEBITE_PERSIST_EXPIRY_ON_READ", "True").lower() in ("true", "1", "yes"),
    "EXPIRING_SOON_HOURS": int(os.getenv("SAVEBITE_EXPIRING_SOON_HOURS", "24")),
    "CO2_KG_PER_MEAL": os.getenv("SAVEBITE_CO2_KG_PER_MEAL", "2.5"),
}

# ==============================================================================
# LOGGING
# ==============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

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
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "authentication": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "marketplace": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "activity": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "infrastructure": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "utils": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}
