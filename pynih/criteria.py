"""
Search criteria for the NIH RePORTER project search endpoint
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from .config import QueryConfig
from .fields import ProjectField, SortOrder


def clamp_limit(limit: int) -> int:
    """Normalize a page size to a value the API accepts"""
    if limit <= 0:
        return QueryConfig.DEFAULT_LIMIT
    if limit > QueryConfig.MAX_LIMIT:
        return QueryConfig.MAX_LIMIT
    return limit


def clamp_offset(offset: int) -> int:
    """Normalize an offset to a value the API accepts"""
    return max(offset, QueryConfig.MIN_OFFSET)


@dataclass(frozen=True)
class SearchCriteria:
    """
    Immutable snapshot of a project query

    Values are expected to be normalized already (see ProjectQuery);
    __post_init__ clamps limit and offset again so that no invalid
    pagination value is ever serialized.
    """
    pi_profile_ids: Tuple[int, ...] = ()
    fiscal_years: Tuple[int, ...] = ()
    include_active_projects: bool = True
    use_relevance: bool = False
    excluded_fields: Tuple[ProjectField, ...] = ()
    sort_field: Optional[ProjectField] = None
    sort_order: Optional[SortOrder] = None
    offset: int = 0
    limit: int = QueryConfig.DEFAULT_LIMIT

    def __post_init__(self):
        object.__setattr__(self, 'limit', clamp_limit(self.limit))
        object.__setattr__(self, 'offset', clamp_offset(self.offset))

    def with_offset(self, offset: int) -> 'SearchCriteria':
        """Return a copy of these criteria starting at another offset"""
        return replace(self, offset=offset)

    def to_request_body(self) -> Dict[str, Any]:
        """
        Serialize to the wire request body

        sort_order and sort_field are only present when a sort field is set;
        the API treats an explicit null differently from an absent key.
        """
        body: Dict[str, Any] = {
            "criteria": {
                "use_relevance": self.use_relevance,
                "fiscal_years": list(self.fiscal_years),
                "include_active_projects": self.include_active_projects,
                "pi_profile_ids": list(self.pi_profile_ids),
            },
            "exclude_fields": [f.value for f in self.excluded_fields],
            "offset": self.offset,
            "limit": self.limit,
        }

        if self.sort_field is not None:
            order = self.sort_order or SortOrder(QueryConfig.DEFAULT_SORT_ORDER)
            body["sort_order"] = order.value
            body["sort_field"] = self.sort_field.value

        return body
