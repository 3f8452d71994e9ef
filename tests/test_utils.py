import json

import pytest

from pynih import ProjectDecoder
from pynih.utils import (
    calculate_total_funding,
    create_project_summary,
    extract_unique_organizations,
    filter_active_projects,
    filter_projects_by_amount,
    get_funding_statistics,
    group_projects_by_fiscal_year,
)

from conftest import make_raw_project


@pytest.fixture
def projects():
    raw = [
        make_raw_project(1, award_amount=100000, fiscal_year=2021),
        make_raw_project(2, award_amount=300000, is_active=False),
        make_raw_project(3, award_amount=None),
    ]
    raw[2]["organization"] = dict(raw[2]["organization"], org_name="JOHNS HOPKINS UNIVERSITY")
    return ProjectDecoder().decode(json.dumps({"results": raw}))


def test_filter_projects_by_amount(projects):
    assert [p.appl_id for p in filter_projects_by_amount(projects, min_amount=200000)] == [2]
    assert [p.appl_id for p in filter_projects_by_amount(projects, max_amount=200000)] == [1]


def test_filter_active_projects(projects):
    assert [p.appl_id for p in filter_active_projects(projects)] == [1, 3]


def test_group_projects_by_fiscal_year(projects):
    grouped = group_projects_by_fiscal_year(projects)
    assert list(grouped) == [2020, 2021]
    assert [p.appl_id for p in grouped[2020]] == [2, 3]


def test_extract_unique_organizations(projects):
    assert extract_unique_organizations(projects) == ["JOHNS HOPKINS UNIVERSITY", "UNIVERSITY OF FLORIDA"]


def test_funding_statistics(projects):
    assert calculate_total_funding(projects) == 400000
    stats = get_funding_statistics(projects)
    assert stats['average_funding'] == 200000
    assert stats['median_funding'] == 200000
    assert stats['project_count'] == 3
    assert stats['funded_project_count'] == 2
    assert get_funding_statistics([])['total_funding'] == 0.0


def test_create_project_summary(projects):
    summary = create_project_summary(projects[0])
    assert summary['contact_pi'] == "Pinaki  Sarder"
    assert summary['start_date'] == "2019-07-01"
    assert summary['organization'] == "UNIVERSITY OF FLORIDA"
