"""
Wire schemas for NIH RePORTER project search results

These pydantic models describe the JSON the API returns, field for field,
using the API's own names. They only validate structure; normalization into
the public dataclasses lives in models.py.
"""

from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Strict


# The API sometimes sends numeric identifiers as strings
LaxInt = Annotated[int, Strict(False)]


class WirePayload(BaseModel):
    """Base for wire models: strict types, unknown keys ignored"""
    model_config = ConfigDict(strict=True, extra='ignore', frozen=True)


class PersonPayload(WirePayload):
    profile_id: int
    first_name: str
    last_name: str
    middle_name: str
    full_name: str
    is_contact_pi: bool
    title: Optional[str] = None


class OrganizationPayload(WirePayload):
    org_name: str
    city: Optional[str] = None
    country: Optional[str] = None
    org_city: Optional[str] = None
    org_state: Optional[str] = None
    org_country: Optional[str] = None
    org_state_name: Optional[str] = None
    org_zipcode: Optional[str] = None
    org_fips: Optional[str] = None
    org_ipf_code: Optional[str] = None
    external_org_id: LaxInt
    dept_type: Optional[str] = None
    fips_county_code: Optional[str] = None
    org_duns: Optional[List[str]] = None
    org_ueis: Optional[List[str]] = None
    primary_duns: Optional[str] = None
    primary_uei: Optional[str] = None


class ProjectPayload(WirePayload):
    appl_id: int
    subproject_id: Optional[str] = None
    fiscal_year: int
    project_num: str
    project_serial_num: Optional[str] = None
    award_type: Optional[str] = None
    activity_code: str
    award_amount: Optional[float] = None
    direct_cost_amt: Optional[float] = None
    indirect_cost_amt: Optional[float] = None
    is_active: bool
    cong_district: Optional[str] = None
    # Dates stay strings here; they are parsed during normalization
    project_start_date: Optional[str] = None
    project_end_date: Optional[str] = None
    budget_start: Optional[str] = None
    budget_end: Optional[str] = None
    principal_investigators: List[PersonPayload]
    date_added: str
    agency_code: str
    arra_funded: str
    opportunity_number: Optional[str] = None
    is_new: bool
    core_project_num: str
    mechanism_code_dc: str
    project_title: str
    covid_response: Optional[List[str]] = None
    cfda_code: Optional[str] = None
    organization: OrganizationPayload
    spending_categories: Optional[List[LaxInt]] = None
    spending_categories_desc: Optional[str] = None
    terms: Optional[str] = None
    pref_terms: Optional[str] = None
    abstract_text: Optional[str] = None
