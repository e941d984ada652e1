"""Pydantic schemas for the audit API.

Responses are serialised in camelCase, the shape the dashboard consumes.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from onboarding.core.constants import AUDIT_DELETED_ACTOR_SUFFIX, AUDIT_SYSTEM_ACTOR
from onboarding.core.pagination import Page
from onboarding.modules.audit.models import ActionType, AuditLog
from onboarding.modules.users.models import User


class CamelModel(BaseModel):
    """Base schema that reads snake_case and writes camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


def actor_display_name(actor: User | None) -> str:
    """Name shown for the actor of an entry.

    ``SYSTEM`` when there is no actor; withdrawn users are marked as such.
    """
    if actor is None:
        return AUDIT_SYSTEM_ACTOR
    if actor.is_deleted:
        return f"{actor.name}{AUDIT_DELETED_ACTOR_SUFFIX}"
    return actor.name


class AuditLogResponse(CamelModel):
    """One audit entry as returned by the API."""

    id: int
    action_type: ActionType
    entity_type: str
    entity_id: int | None = None
    performed_by_id: int | None = None
    performed_by_name: str = AUDIT_SYSTEM_ACTOR
    performed_by_email: str | None = None
    old_value: Any | None = None
    new_value: Any | None = None
    description: str | None = None
    metadata: dict[str, Any] | None = None
    action_time: datetime
    created_at: datetime | None = None

    @classmethod
    def from_entry(cls, entry: AuditLog) -> "AuditLogResponse":
        """Build a response from an entry whose actor is already loaded."""
        actor = entry.performed_by
        return cls(
            id=entry.id,
            action_type=entry.action_type,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            performed_by_id=actor.id if actor else None,
            performed_by_name=actor_display_name(actor),
            performed_by_email=actor.email if actor else None,
            old_value=entry.old_value,
            new_value=entry.new_value,
            description=entry.description,
            metadata=entry.metadata_,
            action_time=entry.action_time,
            created_at=entry.created_at,
        )


class AuditLogPage(CamelModel):
    """A page of audit entries.

    Serialised as ``{content, totalElements, totalPages, pageNumber, pageSize}``.
    """

    content: list[AuditLogResponse]
    total_elements: int
    total_pages: int
    page_number: int
    page_size: int

    @classmethod
    def from_page(cls, page: Page[AuditLog]) -> "AuditLogPage":
        converted = page.map(AuditLogResponse.from_entry)
        return cls(
            content=list(converted.content),
            total_elements=converted.total_elements,
            total_pages=converted.total_pages,
            page_number=converted.page_number,
            page_size=converted.page_size,
        )
