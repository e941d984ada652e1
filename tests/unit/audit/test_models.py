"""Tests for AuditLog convenience predicates."""

import pytest

from onboarding.modules.audit.models import ActionType, AuditLog


@pytest.mark.parametrize(
    ("action_type", "create", "update", "delete"),
    [
        (ActionType.CREATE, True, False, False),
        (ActionType.UPDATE, False, True, False),
        (ActionType.DELETE, False, False, True),
        (ActionType.ASSIGN, False, False, False),
    ],
)
def test_action_predicates(action_type, create, update, delete):
    entry = AuditLog(action_type=action_type, entity_type="Track")

    assert entry.is_create_action is create
    assert entry.is_update_action is update
    assert entry.is_delete_action is delete


def test_has_performer():
    assert AuditLog(performed_by_id=3).has_performer is True
    assert AuditLog(performed_by_id=None).has_performer is False


@pytest.mark.parametrize("value", [None, "", {}, []])
def test_empty_snapshots(value):
    entry = AuditLog(old_value=value, new_value=value)

    assert entry.has_old_value is False
    assert entry.has_new_value is False


def test_present_snapshots():
    entry = AuditLog(old_value={"name": "Frontend"}, new_value=["a"])

    assert entry.has_old_value is True
    assert entry.has_new_value is True
