"""
Data models for PyNIH representing NIH RePORTER entities
"""

import re
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from .schema import OrganizationPayload, PersonPayload, ProjectPayload


TERM_PATTERN = re.compile(r"<([^>]+)>")


def parse_datetime(date_str: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO datetime string from the API

    Returns None when the value is absent. A malformed string raises the
    ValueError from datetime.fromisoformat unchanged.
    """
    if date_str is None:
        return None
    return datetime.fromisoformat(date_str.replace('Z', '+00:00'))


def split_delimited(value: Optional[str], sep: str = ";") -> Optional[Tuple[str, ...]]:
    """Split a delimited string into trimmed, non-empty pieces"""
    if value is None:
        return None
    return tuple(part.strip() for part in value.split(sep) if part.strip())


def extract_terms(value: Optional[str]) -> Optional[Tuple[str, ...]]:
    """Extract the text of every <tag> group; a string without tags gives ()"""
    if value is None:
        return None
    return tuple(TERM_PATTERN.findall(value))


@dataclass(frozen=True)
class Person:
    """Represents a principal investigator on a project"""
    profile_id: int
    first_name: str
    last_name: str
    middle_name: str
    full_name: str
    is_contact_pi: bool
    title: Optional[str] = None

    @classmethod
    def from_payload(cls, data: PersonPayload) -> 'Person':
        """Create Person from a validated payload"""
        return cls(
            profile_id=data.profile_id,
            first_name=data.first_name,
            last_name=data.last_name,
            middle_name=data.middle_name,
            full_name=data.full_name,
            is_contact_pi=data.is_contact_pi,
            title=data.title
        )

    def __str__(self) -> str:
        return f"Person(profile_id={self.profile_id}, name='{self.full_name}')"


@dataclass(frozen=True)
class Organization:
    """Represents the awardee organization of a project"""
    org_name: str
    external_org_id: int
    city: Optional[str] = None
    country: Optional[str] = None
    org_city: Optional[str] = None
    org_state: Optional[str] = None
    org_country: Optional[str] = None
    org_state_name: Optional[str] = None
    org_zipcode: Optional[str] = None
    org_fips: Optional[str] = None
    org_ipf_code: Optional[str] = None
    dept_type: Optional[str] = None
    fips_county_code: Optional[str] = None
    org_duns: Optional[Tuple[str, ...]] = None
    org_ueis: Optional[Tuple[str, ...]] = None
    primary_duns: Optional[str] = None
    primary_uei: Optional[str] = None

    @classmethod
    def from_payload(cls, data: OrganizationPayload) -> 'Organization':
        """Create Organization from a validated payload"""
        return cls(
            org_name=data.org_name,
            external_org_id=data.external_org_id,
            city=data.city,
            country=data.country,
            org_city=data.org_city,
            org_state=data.org_state,
            org_country=data.org_country,
            org_state_name=data.org_state_name,
            org_zipcode=data.org_zipcode,
            org_fips=data.org_fips,
            org_ipf_code=data.org_ipf_code,
            dept_type=data.dept_type,
            fips_county_code=data.fips_county_code,
            org_duns=tuple(data.org_duns) if data.org_duns is not None else None,
            org_ueis=tuple(data.org_ueis) if data.org_ueis is not None else None,
            primary_duns=data.primary_duns,
            primary_uei=data.primary_uei
        )

    def __str__(self) -> str:
        return f"Organization(id={self.external_org_id}, name='{self.org_name}')"


@dataclass(frozen=True)
class Project:
    """
    Represents a project/award returned by NIH RePORTER

    Fields the API did not send (or sent as null) are None. Fields removed
    with an exclude list are therefore None as well.
    """
    appl_id: int
    fiscal_year: int
    project_num: str
    activity_code: str
    is_active: bool
    principal_investigators: Tuple[Person, ...]
    date_added: datetime
    agency_code: str
    arra_funded: str
    is_new: bool
    core_project_num: str
    mechanism_code_dc: str
    project_title: str
    organization: Organization

    subproject_id: Optional[str] = None
    project_serial_num: Optional[str] = None
    award_type: Optional[str] = None
    cong_district: Optional[str] = None
    opportunity_number: Optional[str] = None
    cfda_code: Optional[str] = None

    # Amounts
    award_amount: Optional[float] = None
    direct_cost: Optional[float] = None
    indirect_cost: Optional[float] = None

    # Dates
    project_start_date: Optional[datetime] = None
    project_end_date: Optional[datetime] = None
    budget_start_date: Optional[datetime] = None
    budget_end_date: Optional[datetime] = None

    # Excludable fields
    covid_response: Optional[Tuple[str, ...]] = None
    spending_categories: Optional[Tuple[int, ...]] = None
    spending_categories_desc: Optional[Tuple[str, ...]] = None
    terms: Optional[Tuple[str, ...]] = None
    pref_terms: Optional[Tuple[str, ...]] = None
    abstract_text: Optional[str] = None

    @classmethod
    def from_payload(cls, data: ProjectPayload) -> 'Project':
        """Create Project from a validated payload"""
        return cls(
            appl_id=data.appl_id,
            fiscal_year=data.fiscal_year,
            project_num=data.project_num,
            activity_code=data.activity_code,
            is_active=data.is_active,
            principal_investigators=tuple(Person.from_payload(p) for p in data.principal_investigators),
            date_added=parse_datetime(data.date_added),
            agency_code=data.agency_code,
            arra_funded=data.arra_funded,
            is_new=data.is_new,
            core_project_num=data.core_project_num,
            mechanism_code_dc=data.mechanism_code_dc,
            project_title=data.project_title,
            organization=Organization.from_payload(data.organization),
            subproject_id=data.subproject_id,
            project_serial_num=data.project_serial_num,
            award_type=data.award_type,
            cong_district=data.cong_district,
            opportunity_number=data.opportunity_number,
            cfda_code=data.cfda_code,
            award_amount=data.award_amount,
            direct_cost=data.direct_cost_amt,
            indirect_cost=data.indirect_cost_amt,
            project_start_date=parse_datetime(data.project_start_date),
            project_end_date=parse_datetime(data.project_end_date),
            budget_start_date=parse_datetime(data.budget_start),
            budget_end_date=parse_datetime(data.budget_end),
            covid_response=tuple(data.covid_response) if data.covid_response is not None else None,
            spending_categories=tuple(data.spending_categories) if data.spending_categories is not None else None,
            spending_categories_desc=split_delimited(data.spending_categories_desc),
            terms=extract_terms(data.terms),
            pref_terms=split_delimited(data.pref_terms),
            abstract_text=data.abstract_text
        )

    @property
    def contact_pi(self) -> Optional[Person]:
        """The contact principal investigator, if one is flagged"""
        for person in self.principal_investigators:
            if person.is_contact_pi:
                return person
        return None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation (datetimes as ISO strings)"""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, datetime):
                data[key] = value.isoformat()
        return data

    def __str__(self) -> str:
        """String representation of project"""
        return f"Project(appl_id={self.appl_id}, project_num='{self.project_num}', title='{self.project_title}')"

    def __repr__(self) -> str:
        """Detailed string representation"""
        return self.__str__()
