import pytest

from pynih import ProjectField, ProjectQuery, SearchCriteria, SortOrder
from pynih.criteria import clamp_limit, clamp_offset


@pytest.mark.parametrize("value,expected", [
    (-10, 50),
    (0, 50),
    (1, 1),
    (500, 500),
    (14999, 14999),
    (15000, 14999),
    (10 ** 6, 14999),
])
def test_limit_is_clamped(value, expected):
    assert clamp_limit(value) == expected
    assert ProjectQuery().set_limit(value).limit == expected


@pytest.mark.parametrize("value,expected", [(-1, 0), (-500, 0), (0, 0), (75, 75)])
def test_offset_is_clamped(value, expected):
    assert clamp_offset(value) == expected
    assert ProjectQuery().set_offset(value).offset == expected


def test_criteria_clamps_direct_construction():
    criteria = SearchCriteria(limit=0, offset=-3)
    assert criteria.limit == 50
    assert criteria.offset == 0


def test_setters_are_chainable():
    query = ProjectQuery()
    assert query.set_pi_profile_ids([1]) is query
    assert query.set_fiscal_years([2020]) is query
    assert query.set_use_relevance(True) is query
    assert query.set_include_active_projects(False) is query
    assert query.add_excluded_field("Terms") is query
    assert query.remove_excluded_field("Terms") is query
    assert query.set_limit(10).set_offset(20) is query
    assert query.set_sort_field("ApplId").set_sort_order("desc") is query


def test_add_excluded_field_is_idempotent():
    query = ProjectQuery().add_excluded_field(ProjectField.TERMS).add_excluded_field("Terms")
    assert query.excluded_fields == (ProjectField.TERMS,)


def test_set_excluded_fields_drops_duplicates():
    query = ProjectQuery().set_excluded_fields(["Terms", "AbstractText", "Terms"])
    assert query.excluded_fields == (ProjectField.TERMS, ProjectField.ABSTRACT_TEXT)


def test_remove_excluded_field():
    query = ProjectQuery().set_excluded_fields(["Terms", "PrefTerms"])
    query.remove_excluded_field("Terms").remove_excluded_field("Terms")
    assert query.excluded_fields == (ProjectField.PREF_TERMS,)


def test_appl_id_is_sort_only():
    with pytest.raises(ValueError):
        ProjectQuery().add_excluded_field("ApplId")
    query = ProjectQuery().set_sort_field("ApplId")
    assert query.build_request_body()["sort_field"] == "ApplId"


def test_unknown_field_is_rejected():
    with pytest.raises(ValueError, match="Unknown project field"):
        ProjectQuery().add_excluded_field("Nope")
    with pytest.raises(ValueError, match="Unknown sort order"):
        ProjectQuery().set_sort_order("sideways")


def test_request_body_without_sort():
    body = (
        ProjectQuery()
        .set_pi_profile_ids([10936793])
        .set_fiscal_years([2020, 2021])
        .set_use_relevance(True)
        .set_excluded_fields(["PrefTerms", "Terms", "AbstractText"])
        .build_request_body()
    )
    assert body == {
        "criteria": {
            "use_relevance": True,
            "fiscal_years": [2020, 2021],
            "include_active_projects": True,
            "pi_profile_ids": [10936793],
        },
        "exclude_fields": ["PrefTerms", "Terms", "AbstractText"],
        "offset": 0,
        "limit": 50,
    }
    assert "sort_order" not in body
    assert "sort_field" not in body


def test_sort_order_defaults_to_ascending():
    body = ProjectQuery().set_sort_field(ProjectField.APPL_ID).build_request_body()
    assert body["sort_field"] == "ApplId"
    assert body["sort_order"] == "asc"


def test_sort_order_without_field_is_not_sent():
    body = ProjectQuery().set_sort_order(SortOrder.DESC).build_request_body()
    assert "sort_order" not in body


def test_build_criteria_is_a_snapshot():
    query = ProjectQuery().set_fiscal_years([2020])
    criteria = query.build_criteria()
    query.set_fiscal_years([2021]).set_limit(5)
    assert criteria.fiscal_years == (2020,)
    assert criteria.limit == 50
    with pytest.raises(AttributeError):
        criteria.limit = 10


def test_with_offset_keeps_everything_else():
    criteria = SearchCriteria(fiscal_years=(2020,), limit=10)
    moved = criteria.with_offset(30)
    assert moved.offset == 30
    assert moved.limit == 10
    assert moved.fiscal_years == (2020,)
    assert criteria.offset == 0
