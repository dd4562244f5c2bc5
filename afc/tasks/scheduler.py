"""
Scheduled tasks configuration for Celery Beat
"""

from celery.schedules import crontab
from afc.celery_app import celery
from afc.core.config import settings

# Configure periodic tasks
celery.conf.beat_schedule = {
    'auto-finalize-ended-contests': {
        'task': 'afc.tasks.contest_tasks.auto_finalize_ended_contests_task',
        'schedule': crontab(minute=f'*/{settings.sweep_interval_minutes}'),
    },
}
