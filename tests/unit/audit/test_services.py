"""Tests for audit services."""

import csv
import io
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest
from pydantic import BaseModel

from onboarding.core.pagination import Page, PageRequest
from onboarding.modules.audit.filters import UNSET, Equals
from onboarding.modules.audit.models import ActionType, AuditLog
from onboarding.modules.audit.services import (
    AuditContext,
    AuditQueryService,
    AuditService,
    serialize_value,
)
from onboarding.modules.users.models import User, UserRole


def make_user(role: UserRole = UserRole.PM, **kwargs) -> User:
    defaults = {
        "id": 7,
        "email": "pm@example.com",
        "name": "Kim PM",
        "role": role,
        "is_active": True,
        "deleted_at": None,
    }
    return User(**{**defaults, **kwargs})


class TestSerializeValue:
    """Tests for snapshot serialization."""

    def test_primitives_pass_through(self):
        assert serialize_value(None) is None
        assert serialize_value("a") == "a"
        assert serialize_value(3) == 3
        assert serialize_value(True) is True

    def test_special_types(self):
        assert serialize_value(UUID("12345678-1234-5678-1234-567812345678")) == (
            "12345678-1234-5678-1234-567812345678"
        )
        assert serialize_value(date(2026, 3, 1)) == "2026-03-01"
        assert serialize_value(datetime(2026, 3, 1, 9, 0, tzinfo=UTC)) == (
            "2026-03-01T09:00:00+00:00"
        )
        assert serialize_value(Decimal("1.50")) == "1.50"
        assert serialize_value(ActionType.ASSIGN) == "ASSIGN"

    def test_nested_containers(self):
        value = {"tags": ("a", "b"), "when": date(2026, 1, 2), 3: [Decimal("2")]}

        assert serialize_value(value) == {"tags": ["a", "b"], "when": "2026-01-02", "3": ["2"]}

    def test_pydantic_model(self):
        class TrackSnapshot(BaseModel):
            name: str
            created: date

        assert serialize_value(TrackSnapshot(name="Frontend", created=date(2026, 1, 1))) == {
            "name": "Frontend",
            "created": "2026-01-01",
        }

    def test_dataclass(self):
        @dataclass
        class StepSnapshot:
            title: str
            order: int

        assert serialize_value(StepSnapshot("Intro", 1)) == {"title": "Intro", "order": 1}

    def test_unknown_objects_fall_back_to_str(self):
        class Opaque:
            def __str__(self) -> str:
                return "opaque"

        assert serialize_value(Opaque()) == "opaque"


class TestAuditContext:
    """Tests for AuditContext."""

    def test_pm_is_recorded_as_performer(self):
        pm = make_user()

        assert AuditContext(actor=pm).performer is pm

    def test_non_pm_actions_are_system_actions(self):
        instructor = make_user(role=UserRole.INSTRUCTOR)

        assert AuditContext(actor=instructor).performer is None

    def test_no_actor(self):
        assert AuditContext().performer is None

    def test_metadata_omits_missing_values(self):
        context = AuditContext(ip_address="10.0.0.1", request_id="req-1")

        assert context.as_metadata() == {"ip_address": "10.0.0.1", "request_id": "req-1"}


class TestAuditService:
    """Tests for writing audit entries."""

    @pytest.fixture
    def mock_session(self):
        """Create a mock database session."""
        session = AsyncMock()
        session.add = MagicMock()
        session.flush = AsyncMock()
        return session

    async def test_log_action_as_pm(self, mock_session):
        pm = make_user()
        service = AuditService(
            mock_session,
            AuditContext(actor=pm, ip_address="10.0.0.1", user_agent="Test Agent"),
        )

        entry = await service.log_action(
            ActionType.UPDATE,
            "Track",
            5,
            description="Renamed track",
            old_value={"name": "Frontend"},
            new_value={"name": "Frontend Advanced"},
        )

        mock_session.add.assert_called_once_with(entry)
        mock_session.flush.assert_awaited_once()
        assert isinstance(entry, AuditLog)
        assert entry.action_type == ActionType.UPDATE
        assert entry.entity_type == "Track"
        assert entry.entity_id == 5
        assert entry.performed_by is pm
        assert entry.old_value == {"name": "Frontend"}
        assert entry.new_value == {"name": "Frontend Advanced"}
        assert entry.metadata_ == {"ip_address": "10.0.0.1", "user_agent": "Test Agent"}
        assert entry.action_time.tzinfo is not None

    async def test_log_action_by_instructor_has_no_performer(self, mock_session):
        service = AuditService(
            mock_session, AuditContext(actor=make_user(role=UserRole.INSTRUCTOR))
        )

        entry = await service.log_action(ActionType.LOGIN, "User", 9)

        assert entry.performed_by is None
        assert entry.metadata_ is None

    async def test_explicit_metadata_wins(self, mock_session):
        service = AuditService(mock_session, AuditContext(request_id="req-1"))

        entry = await service.log_action(
            ActionType.EXPORT,
            "Instructor",
            metadata={"request_id": "override", "rows": 3},
        )

        assert entry.metadata_ == {"request_id": "override", "rows": 3}
        assert entry.entity_id is None

    async def test_storage_errors_propagate(self, mock_session):
        mock_session.flush.side_effect = RuntimeError("database down")
        service = AuditService(mock_session, AuditContext())

        with pytest.raises(RuntimeError):
            await service.log_action(ActionType.CREATE, "Track", 1)


class TestAuditQueryService:
    """Tests for the read-side service with a mocked repository."""

    @pytest.fixture
    def repo(self):
        return AsyncMock()

    @pytest.fixture
    def service(self, repo) -> AuditQueryService:
        return AuditQueryService(repo)

    async def test_search_defaults_to_everything_until_now(self, service, repo):
        repo.search.return_value = Page.empty(PageRequest())
        before = datetime.now(UTC)

        await service.search_logs(PageRequest(0, 100))

        action_type, entity_type, start, end, page = repo.search.await_args.args
        assert action_type is UNSET
        assert entity_type is UNSET
        assert start == datetime(1970, 1, 1, tzinfo=UTC)
        assert before <= end <= datetime.now(UTC)
        assert page == PageRequest(0, 100)

    async def test_search_passes_filters(self, service, repo):
        repo.search.return_value = Page.empty(PageRequest())
        start = datetime(2026, 1, 1, tzinfo=UTC)
        end = datetime(2026, 2, 1, tzinfo=UTC)

        await service.search_logs(
            PageRequest(1, 10),
            action_type=ActionType.DELETE,
            entity_type="Step",
            start=start,
            end=end,
        )

        repo.search.assert_awaited_once_with(
            Equals(ActionType.DELETE), Equals("Step"), start, end, PageRequest(1, 10)
        )

    async def test_listings_delegate(self, service, repo):
        page = PageRequest(2, 5)
        start = datetime(2026, 1, 1, tzinfo=UTC)
        end = datetime(2026, 2, 1, tzinfo=UTC)

        await service.get_recent_logs(page)
        await service.get_logs_by_actor(7, page)
        await service.get_logs_by_entity_type("Track", page)
        await service.get_entity_history("Track", 5)
        await service.get_logs_by_date_range(start, end, page)
        await service.get_logs_by_actor_and_date_range(7, start, end, page)

        repo.recent.assert_awaited_once_with(page)
        repo.list_by_actor.assert_awaited_once_with(7, page)
        repo.list_by_entity_type.assert_awaited_once_with("Track", page)
        repo.list_history.assert_awaited_once_with("Track", 5)
        repo.list_by_date_range.assert_awaited_once_with(start, end, page)
        repo.list_by_actor_and_date_range.assert_awaited_once_with(7, start, end, page)

    async def test_action_type_stats_use_names(self, service, repo):
        repo.count_by_action_type.return_value = [
            (ActionType.CREATE, 4),
            (ActionType.UPDATE, 1),
        ]

        assert await service.get_stats_by_action_type() == {"CREATE": 4, "UPDATE": 1}

    async def test_entity_type_stats_keep_order(self, service, repo):
        repo.count_by_entity_type.return_value = [("Track", 5), ("Module", 2), ("Step", 2)]

        stats = await service.get_stats_by_entity_type()

        assert list(stats.items()) == [("Track", 5), ("Module", 2), ("Step", 2)]

    async def test_export_csv(self, service, repo):
        pm = make_user()
        withdrawn = make_user(id=8, name="Choi PM", deleted_at=datetime(2026, 2, 1, tzinfo=UTC))
        repo.search_all.return_value = [
            AuditLog(
                id=3,
                action_type=ActionType.DELETE,
                entity_type="Step",
                entity_id=None,
                performed_by=None,
                description=None,
                action_time=datetime(2026, 3, 1, 18, 30, tzinfo=UTC),
            ),
            AuditLog(
                id=2,
                action_type=ActionType.UPDATE,
                entity_type="Track",
                entity_id=5,
                performed_by=withdrawn,
                description="Renamed, again",
                action_time=datetime(2026, 3, 1, 10, 0, tzinfo=UTC),
            ),
            AuditLog(
                id=1,
                action_type=ActionType.CREATE,
                entity_type="Track",
                entity_id=5,
                performed_by=pm,
                description='Created "Frontend"',
                action_time=datetime(2026, 3, 1, 9, 0, 5, tzinfo=UTC),
            ),
        ]

        data = await service.export_csv(entity_type="Track")

        assert data.startswith(b"\xef\xbb\xbf")
        text = data.decode("utf-8-sig")
        assert text.splitlines()[0] == (
            '"Action Time","Action Type","Entity Type","Entity ID","Performed By","Description"'
        )
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[1:] == [
            ["2026-03-01 18:30:00", "DELETE", "Step", "", "SYSTEM", ""],
            ["2026-03-01 10:00:00", "UPDATE", "Track", "5", "Choi PM (deleted)", "Renamed, again"],
            ["2026-03-01 09:00:05", "CREATE", "Track", "5", "Kim PM", 'Created "Frontend"'],
        ]
        args = repo.search_all.await_args
        assert args.args[0] is UNSET
        assert args.args[1] == Equals("Track")
        assert args.kwargs["limit"] == 10_000

    async def test_export_csv_empty(self, service, repo):
        repo.search_all.return_value = []

        data = await service.export_csv()

        rows = list(csv.reader(io.StringIO(data.decode("utf-8-sig"))))
        assert len(rows) == 1
