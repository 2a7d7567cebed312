"""
Django settings for the regionwatch project.

Values are read from the environment; a .env file at the project root is
loaded first if present.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET", "regionwatch-insecure-development-key")

DEBUG = os.getenv("DEBUG", "False") == "True"

ALLOWED_HOSTS = [host for host in os.getenv("ALLOWED_HOSTS", "").split(",") if host]

INSTALLED_APPS = [
    "regionwatch",
]

MIDDLEWARE = []

ROOT_URLCONF = None

if os.getenv("DBNAME"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("DBNAME"),
            "HOST": os.getenv("DBHOST", "localhost"),
            "PORT": os.getenv("DBPORT", "5432"),
            "USER": os.getenv("DBUSER"),
            "PASSWORD": os.getenv("DBPASSWORD"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "regionwatch.sqlite3",
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

TIME_ZONE = "UTC"
USE_TZ = True

# redis; used by celery and by the region locks
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))

# per-region locks held for the duration of a recompute chain
REGION_LOCKS_ENABLED = os.getenv("REGION_LOCKS_ENABLED", "False") == "True"
REGION_LOCK_TIMEOUT_SECONDS = int(os.getenv("REGION_LOCK_TIMEOUT_SECONDS", "60"))
REGION_LOCK_BLOCKING_TIMEOUT_SECONDS = int(
    os.getenv("REGION_LOCK_BLOCKING_TIMEOUT_SECONDS", "10")
)

# full reconciliation of every region's statistics
RECOMPUTE_ALL_SCHEDULE_MINUTES = int(os.getenv("RECOMPUTE_ALL_SCHEDULE_MINUTES", "30"))

CELERY_BROKER_URL = f"redis://{REDIS_HOST}:{REDIS_PORT}"
CELERY_RESULT_BACKEND = f"redis://{REDIS_HOST}:{REDIS_PORT}"
CELERY_TASK_ALWAYS_EAGER = os.getenv("CELERY_TASK_ALWAYS_EAGER", "False") == "True"
