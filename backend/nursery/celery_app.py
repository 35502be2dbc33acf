"""
Celery für die Bestandsprüfungen der Pépinière

Worker:  celery -A nursery.celery_app worker -Q stock
Beat:    celery -A nursery.celery_app beat
"""
from celery import Celery
from celery.schedules import crontab
from nursery.config import get_settings

settings = get_settings()

celery_app = Celery(
    "semisto-nursery",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["nursery.tasks.stock_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="Europe/Brussels",
    enable_utc=True,
    task_track_started=True,
    # Prüfungen lesen nur und dürfen nach einem Worker-Abbruch wiederholt werden
    task_acks_late=True,
    task_time_limit=15 * 60,
    worker_prefetch_multiplier=1,
    task_routes={"nursery.tasks.stock_tasks.*": {"queue": "stock"}},
    result_expires=7 * 24 * 3600,
)

celery_app.conf.beat_schedule = {
    # Vor Öffnung der Pépinières (7:00)
    "daily-low-stock-check": {
        "task": "nursery.tasks.stock_tasks.check_low_stock",
        "schedule": crontab(hour=7, minute=0),
    },
    # Nachts, wenn keine Bestellungen laufen (2:30)
    "nightly-stock-ledger-audit": {
        "task": "nursery.tasks.stock_tasks.audit_stock_ledger",
        "schedule": crontab(hour=2, minute=30),
    },
}
