import os

from celery import Celery
from celery.signals import worker_init

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "regionwatch.settings")

REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))

app = Celery(
    "regionwatch",
    backend=f"redis://{REDIS_HOST}:{REDIS_PORT}",
    broker=f"redis://{REDIS_HOST}:{REDIS_PORT}",
)

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
# - namespace='CELERY' means all celery-related configuration keys
#   should have a `CELERY_` prefix.
app.config_from_object("django.conf:settings", namespace="CELERY")

# task modules live outside the default `tasks.py` location
app.autodiscover_tasks(["regionwatch.celeryworkers"])


@worker_init.connect
def configure_worker_logging(**kwargs):  # skipcq: PYL-W0613
    """send the regionwatch logs of a worker to stdout and the log file"""
    from regionwatch.utils.regionwatch_logger import setup_logger

    setup_logger()
