# Celery Tasks
from nursery.tasks import stock_tasks

__all__ = [
    "stock_tasks",
]
