"""
Branch Access Core - Django Settings (Infrastructure Only)
============================================================
Django hosts the persistence and cache adapters of the branch access
core: the audit store table and the shared rate-limit counters.
Policy code does not import Django; it reads BRANCH_SECURITY and
BRANCH_RATE_LIMIT through the config classes.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("BRANCH_ACCESS_SECRET_KEY", "branch-access-dev-key")

DEBUG = os.environ.get("BRANCH_ACCESS_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "branch_access.audit_store",
]

MIDDLEWARE = []

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# ── Cache (rate-limit counters) ───────────────────────────────
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "branch-access",
    }
}

# ── Branch Access Policy ──────────────────────────────────────
BRANCH_SECURITY = {
    "enforce_data_isolation": True,
    "allow_cross_branch_access": True,
    "require_approval_for_sensitive_operations": True,
    "audit_all_operations": True,
    "session_timeout_minutes": 30,
    "max_concurrent_sessions": 3,
}

BRANCH_RATE_LIMIT = {
    "max_requests": 100,
    "window_seconds": 60,
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "branch_access": {
            "handlers": ["console"],
            "level": os.environ.get("BRANCH_ACCESS_LOG_LEVEL", "INFO"),
        },
    },
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
