from __future__ import annotations

from types import SimpleNamespace

import pytest

from app.core.enums import RoleEnum
from app.modules.audit.service import AuditService
from app.modules.identity.schemas import IdentityContext
from app.shared.exceptions import ForbiddenException


class FakeAuditRepository:
    def __init__(self, logs: list[SimpleNamespace]) -> None:
        self.logs = logs
        self.calls: list[dict] = []

    async def list_audit_logs(self, limit: int, offset: int, entity_id: str | None = None):
        self.calls.append({"limit": limit, "offset": offset, "entity_id": entity_id})
        matched = [log for log in self.logs if entity_id is None or log.entity_id == entity_id]
        return matched[offset : offset + limit], len(matched)


def make_logs() -> list[SimpleNamespace]:
    return [
        SimpleNamespace(action="booking.status.override", entity_id="b1"),
        SimpleNamespace(action="booking.deleted", entity_id="b2"),
        SimpleNamespace(action="booking.worker.reassigned", entity_id="b1"),
    ]


@pytest.mark.asyncio
async def test_admin_lists_audit_logs_filtered_by_booking() -> None:
    repository = FakeAuditRepository(make_logs())
    service = AuditService(repository)  # type: ignore[arg-type]
    admin = IdentityContext(subject_id="a1", role=RoleEnum.ADMIN)

    items, total = await service.list_logs(admin, limit=20, offset=0, entity_id="b1")

    assert total == 2
    assert [item.action for item in items] == ["booking.status.override", "booking.worker.reassigned"]
    assert repository.calls == [{"limit": 20, "offset": 0, "entity_id": "b1"}]


@pytest.mark.asyncio
async def test_audit_logs_are_admin_only() -> None:
    repository = FakeAuditRepository(make_logs())
    service = AuditService(repository)  # type: ignore[arg-type]

    with pytest.raises(ForbiddenException):
        await service.list_logs(IdentityContext(subject_id="w1", role=RoleEnum.WORKER), limit=20, offset=0)
    assert repository.calls == []
