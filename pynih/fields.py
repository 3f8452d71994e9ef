"""
Field names understood by the project search endpoint
"""

from enum import Enum
from typing import Union


class ProjectField(str, Enum):
    """Response fields that can be excluded from results or used for sorting"""
    
    SPENDING_CATEGORIES = "SpendingCategories"
    SPENDING_CATEGORIES_DESC = "SpendingCategoriesDesc"
    PROGRAM_OFFICERS = "ProgramOfficers"
    ABSTRACT_TEXT = "AbstractText"
    TERMS = "Terms"
    PREF_TERMS = "PrefTerms"
    COVID_RESPONSE = "CovidResponse"
    SUBPROJECT_ID = "SubprojectId"
    # Sort only
    APPL_ID = "ApplId"
    
    @property
    def excludable(self) -> bool:
        return self is not ProjectField.APPL_ID


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


FieldLike = Union[ProjectField, str]


def to_field(value: FieldLike) -> ProjectField:
    """Coerce a field name to ProjectField, raising ValueError for unknown names"""
    if isinstance(value, ProjectField):
        return value
    try:
        return ProjectField(value)
    except ValueError:
        valid = ", ".join(f.value for f in ProjectField)
        raise ValueError(f"Unknown project field '{value}'. Valid fields: {valid}") from None


def to_excludable_field(value: FieldLike) -> ProjectField:
    """Coerce a field name that is about to be excluded from results"""
    field = to_field(value)
    if not field.excludable:
        raise ValueError(f"'{field.value}' can be used as a sort field but cannot be excluded")
    return field


def to_sort_order(value: Union[SortOrder, str]) -> SortOrder:
    if isinstance(value, SortOrder):
        return value
    try:
        return SortOrder(value.lower())
    except ValueError:
        raise ValueError(f"Unknown sort order '{value}'. Use 'asc' or 'desc'") from None
