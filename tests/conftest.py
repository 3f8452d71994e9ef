import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from pynih import NIHReporterClient, ProjectQuery


PI_ID = 10936793

# Wire keys dropped by the API for each excluded field
EXCLUDED_KEYS = {
    "SpendingCategories": "spending_categories",
    "SpendingCategoriesDesc": "spending_categories_desc",
    "ProgramOfficers": "program_officers",
    "AbstractText": "abstract_text",
    "Terms": "terms",
    "PrefTerms": "pref_terms",
    "CovidResponse": "covid_response",
    "SubprojectId": "subproject_id",
}


def make_raw_project(appl_id: int = 9820709, **overrides) -> Dict[str, Any]:
    """A project as the search endpoint returns it"""
    project = {
        "appl_id": appl_id,
        "subproject_id": None,
        "fiscal_year": 2020,
        "project_num": f"5R01CA{int(appl_id) % 1000000:06d}-02",
        "project_serial_num": "CA123456",
        "award_type": "5",
        "activity_code": "R01",
        "award_amount": 350000,
        "direct_cost_amt": 250000,
        "indirect_cost_amt": 100000,
        "is_active": True,
        "cong_district": "07",
        "project_start_date": "2019-07-01T00:00:00",
        "project_end_date": "2024-06-30T00:00:00",
        "budget_start": "2020-07-01T00:00:00",
        "budget_end": "2021-06-30T00:00:00",
        "principal_investigators": [
            {
                "profile_id": PI_ID,
                "first_name": "Pinaki",
                "last_name": "Sarder",
                "middle_name": "",
                "full_name": "Pinaki  Sarder",
                "is_contact_pi": True,
                "title": "ASSOCIATE PROFESSOR",
            }
        ],
        "date_added": "2020-05-23T00:00:00Z",
        "agency_code": "NIH",
        "arra_funded": "N",
        "opportunity_number": "PA-19-056",
        "is_new": False,
        "core_project_num": "R01CA123456",
        "mechanism_code_dc": "RP",
        "project_title": "Computational pathology of kidney biopsies",
        "covid_response": None,
        "cfda_code": "396",
        "organization": {
            "org_name": "UNIVERSITY OF FLORIDA",
            "city": None,
            "country": None,
            "org_city": "GAINESVILLE",
            "org_state": "FL",
            "org_country": "UNITED STATES",
            "org_state_name": None,
            "org_zipcode": "326115500",
            "org_fips": "US",
            "org_ipf_code": "8761",
            "external_org_id": 8761,
            "dept_type": "INTERNAL MEDICINE/MEDICINE",
            "fips_county_code": None,
            "org_duns": ["969663814"],
            "org_ueis": ["NNFQH1JAPEP3"],
            "primary_duns": "969663814",
            "primary_uei": "NNFQH1JAPEP3",
        },
        "spending_categories": [27, 132],
        "spending_categories_desc": "Cancer; Kidney Disease",
        "terms": "<cancer><therapy>",
        "pref_terms": "Biopsy;Kidney;Pathology",
        "abstract_text": "Abstract of the project.",
        "program_officers": [{"first_name": "Jane", "last_name": "Doe"}],
    }
    project.update(overrides)
    return project


def make_dataset() -> List[Dict[str, Any]]:
    """Nine projects for PI_ID in fiscal years 2020-2021, plus unrelated ones"""
    projects = []
    for i in range(9):
        projects.append(make_raw_project(9820709 + i, fiscal_year=2020 + (i % 2)))
    # Same PI, other fiscal year
    projects.append(make_raw_project(9900001, fiscal_year=2019))
    # Other PI
    other_pi = dict(make_raw_project()["principal_investigators"][0], profile_id=1857551)
    projects.append(make_raw_project(9900002, fiscal_year=2020, principal_investigators=[other_pi]))
    return projects


class FakeReporter:
    """
    In-process stand-in for the project search endpoint

    Applies criteria, offset/limit, sorting and field exclusion to a dataset.
    Scripted responses queued with queue() are served first.
    """

    def __init__(self, projects: Optional[List[Dict[str, Any]]] = None):
        self.projects = projects if projects is not None else make_dataset()
        self.requests: List[Dict[str, Any]] = []
        self._scripted: List[httpx.Response] = []

    def queue(self, status: int, json_body: Any = None, text: Optional[str] = None):
        if text is not None:
            self._scripted.append(httpx.Response(status, text=text))
        else:
            self._scripted.append(httpx.Response(status, json=json_body if json_body is not None else {}))

    def queue_error(self, error: Exception):
        self._scripted.append(error)

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)

        if self._scripted:
            scripted = self._scripted.pop(0)
            if isinstance(scripted, Exception):
                raise scripted
            return scripted

        criteria = body["criteria"]
        matches = list(self.projects)
        if criteria["pi_profile_ids"]:
            wanted = set(criteria["pi_profile_ids"])
            matches = [
                p for p in matches
                if any(pi["profile_id"] in wanted for pi in p["principal_investigators"])
            ]
        if criteria["fiscal_years"]:
            matches = [p for p in matches if p["fiscal_year"] in criteria["fiscal_years"]]
        if not criteria["include_active_projects"]:
            matches = [p for p in matches if not p["is_active"]]
        if body.get("sort_field") == "ApplId":
            matches.sort(key=lambda p: p["appl_id"], reverse=body.get("sort_order") == "desc")

        page = matches[body["offset"]:body["offset"] + body["limit"]]
        dropped = {EXCLUDED_KEYS[f] for f in body["exclude_fields"]}
        page = [{k: v for k, v in p.items() if k not in dropped} for p in page]

        return httpx.Response(200, json={
            "meta": {"total": len(matches), "offset": body["offset"], "limit": body["limit"]},
            "results": page,
        })

    @property
    def offsets(self) -> List[int]:
        return [r["offset"] for r in self.requests]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def reporter():
    return FakeReporter()


@pytest.fixture
def make_client():
    def _make(reporter: FakeReporter, **kwargs) -> NIHReporterClient:
        kwargs.setdefault("retry_base_delay", 0)
        return NIHReporterClient(transport=reporter.transport(), **kwargs)
    return _make


@pytest.fixture
def make_query(make_client):
    def _make(reporter: FakeReporter, **kwargs) -> ProjectQuery:
        return ProjectQuery(client=make_client(reporter, **kwargs))
    return _make
