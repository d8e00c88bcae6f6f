import logging
from typing import Any

from arq import cron

from app.core.database import SessionLocal
from app.services.reconciliation_service import ReconciliationService
from app.tasks import redis_settings

logger = logging.getLogger(__name__)


async def reconcile_settlements_task(ctx: dict[str, Any]) -> int:
    """Background task: complete settlements whose debit has no fulfillment request.

    Runs every 15 minutes.
    """
    db = SessionLocal()
    try:
        count = ReconciliationService(db).reconcile()
        if count > 0:
            logger.info("Reconciled %d settlements", count)
        return count
    finally:
        db.close()


class WorkerSettings:
    functions = [reconcile_settlements_task]
    cron_jobs = [
        cron(reconcile_settlements_task, minute={0, 15, 30, 45}),
    ]
    redis_settings = redis_settings
