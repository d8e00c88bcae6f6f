"""Tests for background tasks."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core import database as db_module
from app.repositories.order_repository import OrderRepository
from app.schemas.order import OrderCreate
from app.services.settlement_service import settlement_reference
from app.services.wallet_service import WalletService
from app.tasks import enqueue_reconcile_settlements, enqueue_task, get_redis_pool
from app.worker import WorkerSettings, reconcile_settlements_task


class TestTasks:
    @pytest.mark.asyncio
    async def test_get_redis_pool(self):
        """Test get_redis_pool creates a pool."""
        mock_pool = MagicMock()

        with patch("app.tasks.create_pool", new_callable=AsyncMock) as mock_create:
            mock_create.return_value = mock_pool

            result = await get_redis_pool()

            assert result == mock_pool
            mock_create.assert_called_once()

    @pytest.mark.asyncio
    async def test_enqueue_task(self):
        """Test enqueue_task enqueues a job and closes the pool."""
        mock_job = MagicMock()
        mock_job.job_id = "job-123"

        mock_pool = MagicMock()
        mock_pool.enqueue_job = AsyncMock(return_value=mock_job)
        mock_pool.close = AsyncMock()

        with patch("app.tasks.get_redis_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = mock_pool

            result = await enqueue_task("my_task", "arg1", kwarg1="value1")

            assert result == mock_job
            mock_pool.enqueue_job.assert_called_once_with("my_task", "arg1", kwarg1="value1")
            mock_pool.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_enqueue_task_closes_pool_on_error(self):
        """Test enqueue_task closes pool even when job enqueue fails."""
        mock_pool = MagicMock()
        mock_pool.enqueue_job = AsyncMock(side_effect=Exception("Redis error"))
        mock_pool.close = AsyncMock()

        with patch("app.tasks.get_redis_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = mock_pool

            with pytest.raises(Exception, match="Redis error"):
                await enqueue_task("failing_task")

            mock_pool.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_enqueue_reconcile_settlements(self):
        mock_job = MagicMock()

        with patch("app.tasks.enqueue_task", new_callable=AsyncMock) as mock_enqueue:
            mock_enqueue.return_value = mock_job

            result = await enqueue_reconcile_settlements()

            assert result == mock_job
            mock_enqueue.assert_called_once_with("reconcile_settlements_task")


class TestWorker:
    def test_reconcile_runs_every_15_minutes(self):
        assert reconcile_settlements_task in WorkerSettings.functions
        (job,) = WorkerSettings.cron_jobs
        assert job.coroutine is reconcile_settlements_task
        assert job.minute == {0, 15, 30, 45}

    @pytest.mark.asyncio
    async def test_reconcile_settlements_task(self, merchant_id):
        """The task completes an orphaned settlement using its own session."""
        db = db_module.SessionLocal()
        try:
            order = OrderRepository(db).create(
                merchant_id, OrderCreate(order_name="#5001", subtotal_price=800)
            )
            wallets = WalletService(db)
            wallets.append_credit(merchant_id, 1000, "seed", "Wallet top-up")
            wallets.append_debit(
                merchant_id,
                800,
                settlement_reference(order.id),
                "Order fulfillment: #5001",
                order_id=order.id,
            )
        finally:
            db.close()

        with (
            patch("app.worker.SessionLocal", db_module.SessionLocal),
            patch("app.services.reconciliation_service.settings") as mock_settings,
        ):
            mock_settings.RECONCILIATION_GRACE_MINUTES = 0
            mock_settings.RECONCILIATION_BATCH_SIZE = 100
            mock_settings.SETTLEMENT_REFERENCE_PREFIX = "settlement"

            count = await reconcile_settlements_task({})

        assert count == 1

    @pytest.mark.asyncio
    async def test_reconcile_settlements_task_nothing_to_do(self):
        with patch("app.worker.SessionLocal", db_module.SessionLocal):
            assert await reconcile_settlements_task({}) == 0
