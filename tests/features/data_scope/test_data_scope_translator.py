"""Tests for ownership scoping and predicates."""

import pytest

from tenant_access.features.data_scope import (
    AllOf,
    AnyOf,
    DataScopeTranslator,
    EntityKind,
    FieldEquals,
    MATCH_ALL,
    MATCH_NONE,
    MatchAll,
    MatchNone,
    Predicate,
)


@pytest.fixture
def translator():
    return DataScopeTranslator()


class TestScopeFor:
    """Test permission to predicate translation."""

    def test_view_all_returns_filters_unchanged(self, translator):
        extra = FieldEquals("status", "active")

        scope = translator.scope_for(EntityKind.CUSTOMERS, {"view_all", "crm:read"}, "u1", extra)

        assert scope is extra

    def test_view_all_without_filters_is_unrestricted(self, translator):
        scope = translator.scope_for("customers", {"view_all"}, "u1")

        assert isinstance(scope, MatchAll)

    def test_without_view_all_restricts_to_owner(self, translator):
        extra = FieldEquals("status", "active")

        scope = translator.scope_for(EntityKind.CUSTOMERS, {"crm:customers:read"}, "u1", extra)

        assert scope == AllOf((
            extra,
            AnyOf((FieldEquals("assignedTo", "u1"), FieldEquals("createdBy", "u1"))),
        ))
        assert scope.to_dict() == {
            "AND": [
                {"status": "active"},
                {"OR": [{"assignedTo": "u1"}, {"createdBy": "u1"}]},
            ]
        }

    def test_without_filters_only_ownership(self, translator):
        scope = translator.scope_for(EntityKind.ORDERS, {"orders:read"}, "u1")

        assert scope == AnyOf((FieldEquals("assignedTo", "u1"), FieldEquals("createdBy", "u1")))

    def test_mapping_filters(self, translator):
        scope = translator.scope_for(EntityKind.TASKS, {"tasks:read"}, "u1", {"status": "open"})

        assert scope.matches({"status": "open", "assignedTo": "u1"})
        assert scope.matches({"status": "open", "createdBy": "u1"})
        assert not scope.matches({"status": "open", "assignedTo": "u2"})
        assert not scope.matches({"status": "done", "assignedTo": "u1"})

    def test_saved_reports_use_creator_only(self, translator):
        scope = translator.scope_for(EntityKind.SAVED_REPORTS, {"reports:read"}, "u1")

        assert scope == FieldEquals("createdBy", "u1")

    @pytest.mark.parametrize("kind", [EntityKind.PRODUCTS, "inventory", "unknown_things"])
    def test_kinds_without_owner_fields_match_nothing(self, translator, kind):
        scope = translator.scope_for(kind, {"products:read"}, "u1", {"status": "active"})

        assert isinstance(scope, MatchNone)
        assert not scope.matches({"status": "active", "createdBy": "u1"})

    @pytest.mark.parametrize("kind", [EntityKind.PRODUCTS, EntityKind.CATEGORIES, EntityKind.INVENTORY])
    def test_catalog_kinds_are_visible_only_with_view_all(self, translator, kind):
        assert translator.scope_for(kind, {"products:*"}, "u1") is MATCH_NONE
        assert translator.scope_for(kind, {"view_all"}, "u1", {"status": "active"}) == FieldEquals("status", "active")
        assert translator.scope_for(kind, {"view_all"}, "u1") == MATCH_ALL

    def test_scope_for_fields(self, translator):
        scope = translator.scope_for_fields(["ownerId"], {"crm:read"}, "u1")

        assert scope == FieldEquals("ownerId", "u1")
        assert translator.scope_for_fields([], {"crm:read"}, "u1") is MATCH_NONE

    def test_global_wildcard_lifts_scoping(self, translator):
        assert translator.scope_for(EntityKind.CUSTOMERS, {"*"}, "u1") == MATCH_ALL


class TestPredicates:
    """Test predicate construction and rendering."""

    def test_to_sql_numbers_parameters(self):
        predicate = AllOf.of(
            FieldEquals("status", "active"),
            AnyOf.of(FieldEquals("assignedTo", "u1"), FieldEquals("createdBy", "u1")),
        )

        clause, params = predicate.to_sql(start_index=3)

        assert clause == '("status" = $3) AND (("assignedTo" = $4) OR ("createdBy" = $5))'
        assert params == ["active", "u1", "u1"]

    def test_constants_to_sql(self):
        assert MATCH_ALL.to_sql() == ("TRUE", [])
        assert MATCH_NONE.to_sql() == ("FALSE", [])

    def test_null_renders_is_null(self):
        assert FieldEquals("deletedAt", None).to_sql() == ('"deletedAt" IS NULL', [])

    @pytest.mark.parametrize("name", ["a b", "x;DROP TABLE users", '"quoted"', "1abc", ""])
    def test_rejects_unsafe_identifiers(self, name):
        with pytest.raises(ValueError):
            FieldEquals(name, 1)

    def test_simplification(self):
        owner = FieldEquals("createdBy", "u1")

        assert AllOf.of(MATCH_ALL, owner) is owner
        assert AllOf.of(MATCH_NONE, owner) is MATCH_NONE
        assert AnyOf.of(MATCH_NONE, owner) is owner
        assert AnyOf.of(MATCH_ALL, owner) is MATCH_ALL
        assert AnyOf.of() is MATCH_NONE

    def test_operators(self):
        a = FieldEquals("a", 1)
        b = FieldEquals("b", 2)

        assert (a & b) == AllOf((a, b))
        assert (a | b) == AnyOf((a, b))

    def test_from_filters(self):
        assert Predicate.from_filters(None) is MATCH_ALL
        assert Predicate.from_filters({}) is MATCH_ALL
        assert Predicate.from_filters({"a": 1}) == FieldEquals("a", 1)

    def test_base_predicate_is_abstract(self):
        with pytest.raises(TypeError):
            Predicate()

    def test_subclass_must_implement_every_rendering(self):
        class OnlyMatches(Predicate):
            def matches(self, record):
                return True

        with pytest.raises(TypeError):
            OnlyMatches()
