"""Tests for AuditLog model, AuditLogRepository, and AuditService."""

from uuid import uuid4

import pytest

from app.repositories.audit_log_repository import AuditLogRepository
from app.services.audit_service import ACTION_ORDER_SETTLED, AuditService


@pytest.fixture
def repo(db_session):
    """Create an AuditLogRepository instance."""
    return AuditLogRepository(db_session)


@pytest.fixture
def service(db_session):
    """Create an AuditService instance."""
    return AuditService(db_session)


class TestAuditLogRepository:
    def test_create(self, repo, merchant_id):
        resource_id = uuid4()
        log = repo.create(
            merchant_id=merchant_id,
            resource_type="order",
            resource_id=resource_id,
            action="order.settled",
            details={"amount": 6000},
            actor_type="system",
        )
        assert log.id is not None
        assert log.merchant_id == merchant_id
        assert log.resource_id == resource_id
        assert log.details == {"amount": 6000}
        assert log.actor_id is None
        assert log.created_at is not None

    def test_get_by_resource(self, repo):
        resource_id = uuid4()
        for action in ("order.costs_updated", "order.settled"):
            repo.create(
                resource_type="order",
                resource_id=resource_id,
                action=action,
                details={},
                actor_type="system",
            )
        repo.create(
            resource_type="order",
            resource_id=uuid4(),
            action="order.settled",
            details={},
            actor_type="system",
        )
        logs = repo.get_by_resource("order", resource_id)
        assert {log.action for log in logs} == {"order.costs_updated", "order.settled"}


class TestAuditService:
    def test_system_actor_when_no_actor_id(self, repo, service):
        resource_id = uuid4()
        service.log(ACTION_ORDER_SETTLED, "order", resource_id)
        (log,) = repo.get_by_resource("order", resource_id)
        assert log.actor_type == "system"
        assert log.details == {}

    def test_user_actor(self, repo, service, merchant_id):
        resource_id = uuid4()
        service.log(
            ACTION_ORDER_SETTLED,
            "order",
            resource_id,
            merchant_id=merchant_id,
            actor_id="ops@example.com",
            details={"amount": 1},
        )
        (log,) = repo.get_by_resource("order", resource_id)
        assert log.actor_type == "user"
        assert log.actor_id == "ops@example.com"
        assert log.merchant_id == merchant_id

    def test_log_status_change(self, repo, service):
        resource_id = uuid4()
        service.log_status_change(
            "fulfillment_request", resource_id, "pending", "sourcing", note="started"
        )
        (log,) = repo.get_by_resource("fulfillment_request", resource_id)
        assert log.action == "fulfillment_request.status_changed"
        assert log.details == {"status": {"old": "pending", "new": "sourcing"}, "note": "started"}
