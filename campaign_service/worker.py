# campaign_service/worker.py
from celery import Celery

from campaign_service.core.config import settings

# Initialize Celery
celery_app = Celery("campaign_worker", broker=settings.REDIS_URL, backend=settings.REDIS_URL)

# Tell Celery where to find our tasks
celery_app.conf.imports = ("campaign_service.tasks",)
celery_app.conf.task_acks_late = True
celery_app.conf.worker_prefetch_multiplier = 1
