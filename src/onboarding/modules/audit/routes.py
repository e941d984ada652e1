"""Audit log API routes.

Read-only endpoints for the PM dashboard. Every route requires a PM.
"""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Query, Response

from onboarding.config import settings
from onboarding.core.auth import CurrentPm
from onboarding.core.constants import (
    AUDIT_CSV_FILENAME_FORMAT,
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
)
from onboarding.core.pagination import PageRequest
from onboarding.modules.audit.models import ActionType
from onboarding.modules.audit.schemas import AuditLogPage, AuditLogResponse
from onboarding.modules.audit.services import AuditQuerySvc


router = APIRouter(prefix="/audit-logs", tags=["audit-logs"])

PageIndex = Annotated[int, Query(ge=0, description="Zero-based page index")]
PageSize = Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE, description="Page size")]
StartDate = Annotated[datetime, Query(alias="startDate", description="ISO-8601, inclusive")]
EndDate = Annotated[datetime, Query(alias="endDate", description="ISO-8601, inclusive")]
OptionalStartDate = Annotated[datetime | None, Query(alias="startDate")]
OptionalEndDate = Annotated[datetime | None, Query(alias="endDate")]
ActionTypeFilter = Annotated[ActionType | None, Query(alias="actionType")]
EntityTypeFilter = Annotated[str | None, Query(alias="entityType")]


def _as_utc(value: datetime | None) -> datetime | None:
    """Naive timestamps are taken to be UTC; aware ones are converted to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# ============================================================
# Listings
# ============================================================


@router.get(
    "",
    response_model=AuditLogPage,
    summary="Recent audit logs",
    description="Most recent audit entries across the whole log.",
)
async def get_recent_logs(
    service: AuditQuerySvc,
    _pm: CurrentPm,
    page: PageIndex = DEFAULT_PAGE,
    size: PageSize = DEFAULT_PAGE_SIZE,
) -> AuditLogPage:
    """List the most recent audit entries."""
    logs = await service.get_recent_logs(PageRequest(page, size))
    return AuditLogPage.from_page(logs)


@router.get(
    "/pm/{pm_id}",
    response_model=AuditLogPage,
    summary="Audit logs by PM",
    description="Actions performed by one PM, most recent first.",
)
async def get_logs_by_pm(
    pm_id: int,
    service: AuditQuerySvc,
    _pm: CurrentPm,
    page: PageIndex = DEFAULT_PAGE,
    size: PageSize = DEFAULT_PAGE_SIZE,
) -> AuditLogPage:
    """List one PM's actions."""
    logs = await service.get_logs_by_actor(pm_id, PageRequest(page, size))
    return AuditLogPage.from_page(logs)


@router.get(
    "/pm/{pm_id}/date-range",
    response_model=AuditLogPage,
    summary="Audit logs by PM within a date range",
)
async def get_logs_by_pm_and_date_range(
    pm_id: int,
    start_date: StartDate,
    end_date: EndDate,
    service: AuditQuerySvc,
    _pm: CurrentPm,
    page: PageIndex = DEFAULT_PAGE,
    size: PageSize = DEFAULT_PAGE_SIZE,
) -> AuditLogPage:
    """List one PM's actions between two instants (inclusive)."""
    logs = await service.get_logs_by_actor_and_date_range(
        pm_id,
        _as_utc(start_date),
        _as_utc(end_date),
        PageRequest(page, size),
    )
    return AuditLogPage.from_page(logs)


@router.get(
    "/entity/{entity_type}",
    response_model=AuditLogPage,
    summary="Audit logs by entity type",
    description="Actions on one kind of resource, e.g. Instructor or Track.",
)
async def get_logs_by_entity_type(
    entity_type: str,
    service: AuditQuerySvc,
    _pm: CurrentPm,
    page: PageIndex = DEFAULT_PAGE,
    size: PageSize = DEFAULT_PAGE_SIZE,
) -> AuditLogPage:
    """List actions on one entity type."""
    logs = await service.get_logs_by_entity_type(entity_type, PageRequest(page, size))
    return AuditLogPage.from_page(logs)


@router.get(
    "/entity/{entity_type}/{entity_id}/history",
    response_model=list[AuditLogResponse],
    summary="Entity change history",
    description="Every recorded change to one resource, oldest first.",
)
async def get_entity_history(
    entity_type: str,
    entity_id: int,
    service: AuditQuerySvc,
    _pm: CurrentPm,
) -> list[AuditLogResponse]:
    """Return the full change history of one resource."""
    logs = await service.get_entity_history(entity_type, entity_id)
    return [AuditLogResponse.from_entry(entry) for entry in logs]


@router.get(
    "/date-range",
    response_model=AuditLogPage,
    summary="Audit logs within a date range",
)
async def get_logs_by_date_range(
    start_date: StartDate,
    end_date: EndDate,
    service: AuditQuerySvc,
    _pm: CurrentPm,
    page: PageIndex = DEFAULT_PAGE,
    size: PageSize = DEFAULT_PAGE_SIZE,
) -> AuditLogPage:
    """List actions between two instants (inclusive).

    A start after the end is not an error; the page is simply empty.
    """
    logs = await service.get_logs_by_date_range(
        _as_utc(start_date), _as_utc(end_date), PageRequest(page, size)
    )
    return AuditLogPage.from_page(logs)


@router.get(
    "/search",
    response_model=AuditLogPage,
    summary="Search audit logs",
    description="Filter by action type, entity type and date range. All filters are optional.",
)
async def search_logs(
    service: AuditQuerySvc,
    _pm: CurrentPm,
    action_type: ActionTypeFilter = None,
    entity_type: EntityTypeFilter = None,
    start_date: OptionalStartDate = None,
    end_date: OptionalEndDate = None,
    page: PageIndex = DEFAULT_PAGE,
    size: PageSize = settings.audit_search_default_page_size,
) -> AuditLogPage:
    """Search the audit log."""
    logs = await service.search_logs(
        PageRequest(page, size),
        action_type=action_type,
        entity_type=entity_type,
        start=_as_utc(start_date),
        end=_as_utc(end_date),
    )
    return AuditLogPage.from_page(logs)


# ============================================================
# Statistics
# ============================================================


@router.get(
    "/stats/action-types",
    response_model=dict[str, int],
    summary="Counts by action type",
)
async def get_stats_by_action_type(
    service: AuditQuerySvc,
    _pm: CurrentPm,
) -> dict[str, int]:
    """Return the number of entries per action type."""
    return await service.get_stats_by_action_type()


@router.get(
    "/stats/entity-types",
    response_model=dict[str, int],
    summary="Counts by entity type",
    description="Entity types ordered from most to least frequent.",
)
async def get_stats_by_entity_type(
    service: AuditQuerySvc,
    _pm: CurrentPm,
) -> dict[str, int]:
    """Return the number of entries per entity type."""
    return await service.get_stats_by_entity_type()


# ============================================================
# Export
# ============================================================


@router.get(
    "/export",
    summary="Export audit logs as CSV",
    description="Same filters as search; returns a CSV attachment.",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}},
)
async def export_logs(
    service: AuditQuerySvc,
    _pm: CurrentPm,
    action_type: ActionTypeFilter = None,
    entity_type: EntityTypeFilter = None,
    start_date: OptionalStartDate = None,
    end_date: OptionalEndDate = None,
) -> Response:
    """Download matching entries as CSV."""
    data = await service.export_csv(
        action_type=action_type,
        entity_type=entity_type,
        start=_as_utc(start_date),
        end=_as_utc(end_date),
    )
    filename = datetime.now(UTC).strftime(AUDIT_CSV_FILENAME_FORMAT)
    return Response(
        content=data,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
