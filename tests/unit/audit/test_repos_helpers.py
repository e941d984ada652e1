"""Tests for audit repository helpers."""

from onboarding.modules.audit.models import AuditLog
from onboarding.modules.audit.repos import _unique_by_id


def test_unique_by_id_drops_repeats_keeping_first_occurrence():
    first = AuditLog(id=3, entity_type="Track")
    repeat = AuditLog(id=3, entity_type="Track")
    second = AuditLog(id=2, entity_type="Step")
    third = AuditLog(id=1, entity_type="Module")

    rows = _unique_by_id([first, second, repeat, third, second])

    assert [row.id for row in rows] == [3, 2, 1]
    assert rows[0] is first


def test_unique_by_id_keeps_order_without_repeats():
    rows = [AuditLog(id=i, entity_type="Track") for i in (5, 9, 1)]

    assert _unique_by_id(rows) == rows


def test_unique_by_id_empty():
    assert _unique_by_id([]) == []
