"""Audit log repository: the query engine behind the audit API.

Every listing is ordered most-recent-first (``action_time DESC, id DESC``)
and resolves the acting user in the same query through a LEFT OUTER JOIN,
so rendering N entries never costs N extra lookups.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Annotated

import structlog
from fastapi import Depends
from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.orm import joinedload

from onboarding.api.dependencies import DBSession
from onboarding.core.pagination import Page, PageRequest
from onboarding.modules.audit.filters import Filter, to_criterion
from onboarding.modules.audit.models import ActionType, AuditLog


log = structlog.get_logger()

NEWEST_FIRST = (AuditLog.action_time.desc(), AuditLog.id.desc())
OLDEST_FIRST = (AuditLog.action_time.asc(), AuditLog.id.asc())


def _unique_by_id(rows: Iterable[AuditLog]) -> list[AuditLog]:
    """Drop repeated entries, keeping the first occurrence of each id.

    Deduplication happens on the fetched objects rather than with SQL
    DISTINCT, which some backends reject next to JSON columns.
    """
    seen: set[int] = set()
    unique: list[AuditLog] = []
    for row in rows:
        if row.id not in seen:
            seen.add(row.id)
            unique.append(row)
    return unique


class AuditLogRepository:
    """Read and append operations on the audit log.

    The repository is bound to one session (and therefore one transaction);
    it holds no other state. There is deliberately no update or delete.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    # ============================================================
    # Write
    # ============================================================

    async def create(self, entry: AuditLog) -> AuditLog:
        """Append an entry and flush it so its id is assigned."""
        self.session.add(entry)
        await self.session.flush()
        return entry

    # ============================================================
    # Listings
    # ============================================================

    async def list_by_actor(self, actor_id: int, page: PageRequest) -> Page[AuditLog]:
        """Page of actions performed by one user."""
        return await self._paginate(page, AuditLog.performed_by_id == actor_id)

    async def list_by_entity_type(
        self, entity_type: str, page: PageRequest
    ) -> Page[AuditLog]:
        """Page of actions on one resource class."""
        return await self._paginate(page, AuditLog.entity_type == entity_type)

    async def list_history(self, entity_type: str, entity_id: int) -> list[AuditLog]:
        """Full change history of one resource instance, oldest first.

        Not paginated: a single resource accumulates a bounded number of edits.
        """
        stmt = (
            self._select_with_actor()
            .where(
                AuditLog.entity_type == entity_type,
                AuditLog.entity_id == entity_id,
            )
            .order_by(*OLDEST_FIRST)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_date_range(
        self, start: datetime, end: datetime, page: PageRequest
    ) -> Page[AuditLog]:
        """Page of actions with ``start <= action_time <= end``.

        ``start > end`` matches nothing and returns an empty page.
        """
        return await self._paginate(page, AuditLog.action_time.between(start, end))

    async def list_by_actor_and_date_range(
        self,
        actor_id: int,
        start: datetime,
        end: datetime,
        page: PageRequest,
    ) -> Page[AuditLog]:
        """Page of one user's actions inside an inclusive time window."""
        return await self._paginate(
            page,
            AuditLog.performed_by_id == actor_id,
            AuditLog.action_time.between(start, end),
        )

    async def search(
        self,
        action_type: Filter,
        entity_type: Filter,
        start: datetime,
        end: datetime,
        page: PageRequest,
    ) -> Page[AuditLog]:
        """Composite filter over action type, entity type and time window."""
        criteria = self._search_criteria(action_type, entity_type, start, end)
        log.debug(
            "audit_search",
            action_type=repr(action_type),
            entity_type=repr(entity_type),
            start=start.isoformat(),
            end=end.isoformat(),
            page=page.page,
            size=page.size,
        )
        return await self._paginate(page, *criteria)

    async def search_all(
        self,
        action_type: Filter,
        entity_type: Filter,
        start: datetime,
        end: datetime,
        limit: int,
    ) -> list[AuditLog]:
        """Same filter as ``search`` without pagination, capped at ``limit`` rows."""
        criteria = self._search_criteria(action_type, entity_type, start, end)
        stmt = (
            self._select_with_actor()
            .where(*criteria)
            .order_by(*NEWEST_FIRST)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return _unique_by_id(result.scalars().all())

    async def recent(self, page: PageRequest) -> Page[AuditLog]:
        """Most recent actions across the whole log (dashboard feed)."""
        return await self._paginate(page)

    # ============================================================
    # Aggregates
    # ============================================================

    async def count_by_action_type(self) -> list[tuple[ActionType, int]]:
        """Row count per action type over the full table."""
        stmt = select(AuditLog.action_type, func.count(AuditLog.id)).group_by(
            AuditLog.action_type
        )
        result = await self.session.execute(stmt)
        return [(action_type, count) for action_type, count in result.all()]

    async def count_by_entity_type(self) -> list[tuple[str, int]]:
        """Row count per entity type, most frequent first.

        Equal counts are ordered by entity type name.
        """
        count = func.count(AuditLog.id)
        stmt = (
            select(AuditLog.entity_type, count)
            .group_by(AuditLog.entity_type)
            .order_by(count.desc(), AuditLog.entity_type.asc())
        )
        result = await self.session.execute(stmt)
        return [(entity_type, total) for entity_type, total in result.all()]

    # ============================================================
    # Helpers
    # ============================================================

    @staticmethod
    def _select_with_actor() -> Select[tuple[AuditLog]]:
        return select(AuditLog).options(joinedload(AuditLog.performed_by))

    @staticmethod
    def _search_criteria(
        action_type: Filter,
        entity_type: Filter,
        start: datetime,
        end: datetime,
    ) -> list[ColumnElement[bool]]:
        return [
            to_criterion(AuditLog.action_type, action_type),
            to_criterion(AuditLog.entity_type, entity_type),
            AuditLog.action_time >= start,
            AuditLog.action_time <= end,
        ]

    async def _paginate(
        self,
        page: PageRequest,
        *criteria: ColumnElement[bool],
    ) -> Page[AuditLog]:
        """Run a newest-first listing plus its total count."""
        count_stmt = select(func.count(AuditLog.id)).where(*criteria)
        total = (await self.session.execute(count_stmt)).scalar_one()

        if total == 0:
            return Page.empty(page)
        if page.offset >= total:
            return Page(
                content=[],
                total_elements=total,
                page_number=page.page,
                page_size=page.size,
            )

        stmt = (
            self._select_with_actor()
            .where(*criteria)
            .order_by(*NEWEST_FIRST)
            .offset(page.offset)
            .limit(page.size)
        )
        result = await self.session.execute(stmt)
        return Page(
            content=_unique_by_id(result.scalars().all()),
            total_elements=total,
            page_number=page.page,
            page_size=page.size,
        )


# Type alias for dependency injection
AuditLogRepo = Annotated[AuditLogRepository, Depends(AuditLogRepository)]
