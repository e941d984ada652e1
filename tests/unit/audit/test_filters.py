"""Tests for explicit audit query filters."""

import pytest
from sqlalchemy.dialects import sqlite
from sqlalchemy.sql.elements import True_

from onboarding.modules.audit.filters import UNSET, Equals, Unset, from_optional, to_criterion
from onboarding.modules.audit.models import ActionType, AuditLog


def compile_sql(criterion) -> str:
    return str(
        criterion.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True})
    )


class TestFromOptional:
    """Tests for mapping optional query values to filters."""

    def test_none_is_unset(self):
        assert from_optional(None) is UNSET

    def test_value_is_equals(self):
        assert from_optional("Track") == Equals("Track")

    def test_falsy_values_are_still_filters(self):
        assert from_optional("") == Equals("")
        assert from_optional(0) == Equals(0)


class TestToCriterion:
    """Tests for translating filters to SQL."""

    def test_unset_matches_everything(self):
        assert isinstance(to_criterion(AuditLog.entity_type, UNSET), True_)

    def test_equals_value(self):
        sql = compile_sql(to_criterion(AuditLog.entity_type, Equals("Track")))

        assert sql == "audit_logs.entity_type = 'Track'"

    def test_equals_enum_value(self):
        sql = compile_sql(to_criterion(AuditLog.action_type, Equals(ActionType.CREATE)))

        assert sql == "audit_logs.action_type = 'CREATE'"

    def test_equals_none_matches_null(self):
        sql = compile_sql(to_criterion(AuditLog.entity_id, Equals(None)))

        assert sql == "audit_logs.entity_id IS NULL"

    def test_rejects_non_filters(self):
        with pytest.raises(TypeError):
            to_criterion(AuditLog.entity_type, "Track")  # type: ignore[arg-type]


def test_unset_repr():
    assert repr(Unset()) == "UNSET"
