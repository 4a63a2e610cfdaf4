from celery import Celery
from toro_mx.core.config import settings

celery_app = Celery(
    "worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_BACKEND,
)
celery_app.conf.task_routes = {"toro_mx.services.tasks.refresh_fx_rates": {"queue": "fx"}}
celery_app.conf.beat_schedule = {
    "refresh-fx-rates": {
        "task": "toro_mx.services.tasks.refresh_fx_rates",
        "schedule": float(settings.FX_REFRESH_INTERVAL),
    },
}

@celery_app.task(bind=True, max_retries=3)
def refresh_fx_rates(self):
    import asyncio
    from toro_mx.services.tasks_internal import refresh_fx_rates_async

    try:
        result = asyncio.run(refresh_fx_rates_async())
    except Exception as e:
        retry_kwargs = {"countdown": 2 ** self.request.retries}
        raise self.retry(exc=e, **retry_kwargs)
    return result.model_dump(mode="json")
