"""
Celery application configuration for background refresh.

Redis broker and result backend. Celery beat runs the weekly insights
refresh (Sunday 00:00 UTC). Tasks are defined in refresh_tasks.py.
"""

from celery import Celery
from celery.schedules import crontab

from generation_layer.config import settings

celery_app = Celery(
    "generation_layer",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    # Task execution
    task_time_limit=settings.CELERY_TASK_TIME_LIMIT,
    task_soft_time_limit=settings.CELERY_TASK_TIME_LIMIT - 30,
    
    # Worker settings
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,
    
    # Serialization
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    
    # Timezone
    timezone="UTC",
    enable_utc=True,
    
    # Result backend
    result_expires=3600,
    
    # Task tracking
    task_track_started=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    
    # Schedule
    beat_schedule={
        "refresh-due-insights-weekly": {
            "task": "refresh_due_insights",
            "schedule": crontab(minute=0, hour=0, day_of_week="sunday"),
        },
    },
)

celery_app.autodiscover_tasks(["generation_layer.tasks"], related_name="refresh_tasks")
