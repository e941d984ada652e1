"""Audit services.

``AuditService`` appends entries for actions that changed data.
``AuditQueryService`` answers the dashboard's read queries: it fills in
filter defaults, turns aggregate rows into mappings and renders exports.

What gets audited:
- CREATE / UPDATE / DELETE of portal resources (tracks, steps, modules, ...)
- ASSIGN operations (e.g. assigning a module to a step)
- EXPORT / IMPORT of data, LOGIN / LOGOUT

Reads, polling and auto-refresh calls are never audited.
"""

import csv
import io
from dataclasses import asdict, is_dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any
from uuid import UUID

import structlog
from fastapi import Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from onboarding.config import settings
from onboarding.core.constants import (
    AUDIT_CSV_TIME_FORMAT,
    AUDIT_EPOCH,
)
from onboarding.core.pagination import Page, PageRequest
from onboarding.modules.audit.filters import from_optional
from onboarding.modules.audit.models import ActionType, AuditLog
from onboarding.modules.audit.repos import AuditLogRepo, AuditLogRepository
from onboarding.modules.audit.schemas import actor_display_name
from onboarding.modules.users.models import User


log = structlog.get_logger()

CSV_HEADER = (
    "Action Time",
    "Action Type",
    "Entity Type",
    "Entity ID",
    "Performed By",
    "Description",
)


def serialize_value(value: Any) -> Any:
    """Convert a value to JSON-compatible primitives.

    Handles pydantic models, dataclasses, UUIDs, dates, decimals, enums
    and nested containers; anything else falls back to ``str``.
    """
    if value is None or isinstance(value, str | int | float | bool):
        return value

    result: Any
    if isinstance(value, BaseModel):
        result = value.model_dump(mode="json")
    elif is_dataclass(value) and not isinstance(value, type):
        result = serialize_value(asdict(value))
    elif isinstance(value, UUID):
        result = str(value)
    elif isinstance(value, datetime | date):
        result = value.isoformat()
    elif isinstance(value, Decimal):
        result = str(value)
    elif isinstance(value, Enum):
        result = value.value
    elif isinstance(value, dict):
        result = {str(k): serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list | tuple | set | frozenset):
        result = [serialize_value(item) for item in value]
    else:
        result = str(value)

    return result


class AuditContext:
    """Request-level information attached to every entry written for a request.

    Passed explicitly to ``AuditService`` instead of living in global or
    context-local state.
    """

    def __init__(
        self,
        actor: User | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize audit context.

        Args:
            actor: The authenticated user, if any
            ip_address: Client IP address
            user_agent: Client user agent
            request_id: Request correlation ID
        """
        self.actor = actor
        self.ip_address = ip_address
        self.user_agent = user_agent
        self.request_id = request_id

    @property
    def performer(self) -> User | None:
        """The user recorded as actor: only PMs, otherwise a system action."""
        if self.actor is not None and self.actor.is_pm:
            return self.actor
        return None

    def as_metadata(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in (
                ("ip_address", self.ip_address),
                ("user_agent", self.user_agent),
                ("request_id", self.request_id),
            )
            if value is not None
        }


class AuditService:
    """Writes audit entries.

    Call ``log_action`` after a mutating action succeeded, inside the same
    session so the entry commits (or rolls back) with the change itself.
    """

    def __init__(self, session: AsyncSession, context: AuditContext) -> None:
        self.repo = AuditLogRepository(session)
        self.context = context

    async def log_action(
        self,
        action_type: ActionType,
        entity_type: str,
        entity_id: int | None = None,
        description: str | None = None,
        old_value: Any = None,
        new_value: Any = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Append an audit entry.

        Args:
            action_type: What kind of action was performed
            entity_type: Class name of the affected resource
            entity_id: ID of the affected resource
            description: Human-readable summary
            old_value: State before the action
            new_value: State after the action
            metadata: Additional context, merged over the request context

        Returns:
            The flushed entry

        Example:
            await audit.log_action(
                ActionType.UPDATE,
                "Track",
                track.id,
                description="Renamed track",
                old_value={"name": "Frontend"},
                new_value={"name": "Frontend Advanced"},
            )
        """
        performer = self.context.performer
        merged_metadata = {**self.context.as_metadata(), **(metadata or {})}

        entry = AuditLog(
            action_type=action_type,
            entity_type=entity_type,
            entity_id=entity_id,
            performed_by=performer,
            old_value=serialize_value(old_value),
            new_value=serialize_value(new_value),
            description=description,
            metadata_=serialize_value(merged_metadata) or None,
            action_time=datetime.now(UTC),
        )
        await self.repo.create(entry)

        log.info(
            "audit_log_created",
            action_type=action_type.value,
            entity_type=entity_type,
            entity_id=entity_id,
            performed_by=performer.email if performer else None,
        )
        return entry


class AuditQueryService:
    """Read-side operations backing the audit API."""

    def __init__(self, repo: AuditLogRepo) -> None:
        self.repo = repo

    async def get_recent_logs(self, page: PageRequest) -> Page[AuditLog]:
        return await self.repo.recent(page)

    async def get_logs_by_actor(self, actor_id: int, page: PageRequest) -> Page[AuditLog]:
        return await self.repo.list_by_actor(actor_id, page)

    async def get_logs_by_entity_type(
        self, entity_type: str, page: PageRequest
    ) -> Page[AuditLog]:
        return await self.repo.list_by_entity_type(entity_type, page)

    async def get_entity_history(self, entity_type: str, entity_id: int) -> list[AuditLog]:
        return await self.repo.list_history(entity_type, entity_id)

    async def get_logs_by_date_range(
        self, start: datetime, end: datetime, page: PageRequest
    ) -> Page[AuditLog]:
        return await self.repo.list_by_date_range(start, end, page)

    async def get_logs_by_actor_and_date_range(
        self,
        actor_id: int,
        start: datetime,
        end: datetime,
        page: PageRequest,
    ) -> Page[AuditLog]:
        return await self.repo.list_by_actor_and_date_range(actor_id, start, end, page)

    async def search_logs(
        self,
        page: PageRequest,
        action_type: ActionType | None = None,
        entity_type: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Page[AuditLog]:
        """Filter the log; omitted filters match everything.

        A missing ``start`` defaults to the Unix epoch and a missing ``end``
        to the current time.
        """
        effective_start, effective_end = _default_window(start, end)
        return await self.repo.search(
            from_optional(action_type),
            from_optional(entity_type),
            effective_start,
            effective_end,
            page,
        )

    async def get_stats_by_action_type(self) -> dict[str, int]:
        """Entry count per action type. Types never used are omitted."""
        rows = await self.repo.count_by_action_type()
        return {ActionType(action_type).value: count for action_type, count in rows}

    async def get_stats_by_entity_type(self) -> dict[str, int]:
        """Entry count per entity type, most frequent first."""
        rows = await self.repo.count_by_entity_type()
        return dict(rows)

    async def export_csv(
        self,
        action_type: ActionType | None = None,
        entity_type: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> bytes:
        """Render matching entries as a CSV document.

        Uses the same filters as ``search_logs``, newest first, capped at
        ``settings.audit_export_max_rows``. The output is UTF-8 with a BOM
        so spreadsheet tools detect the encoding.
        """
        effective_start, effective_end = _default_window(start, end)
        entries = await self.repo.search_all(
            from_optional(action_type),
            from_optional(entity_type),
            effective_start,
            effective_end,
            limit=settings.audit_export_max_rows,
        )

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for entry in entries:
            writer.writerow(
                (
                    _format_time(entry.action_time),
                    entry.action_type.value,
                    entry.entity_type,
                    "" if entry.entity_id is None else entry.entity_id,
                    actor_display_name(entry.performed_by),
                    entry.description or "",
                )
            )

        log.info("audit_log_exported", rows=len(entries))
        return buffer.getvalue().encode("utf-8-sig")


def _default_window(
    start: datetime | None, end: datetime | None
) -> tuple[datetime, datetime]:
    return (
        start if start is not None else AUDIT_EPOCH,
        end if end is not None else datetime.now(UTC),
    )


def _format_time(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.strftime(AUDIT_CSV_TIME_FORMAT)


# Type alias for dependency injection
AuditQuerySvc = Annotated[AuditQueryService, Depends(AuditQueryService)]
