"""
Project query builder for the NIH RePORTER API
"""

import logging
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Tuple, Union

from .config import QueryConfig
from .client import NIHReporterClient
from .criteria import SearchCriteria, clamp_limit, clamp_offset
from .decoder import ProjectDecoder
from .exceptions import QueryError
from .fields import FieldLike, ProjectField, SortOrder, to_excludable_field, to_field, to_sort_order
from .models import Project
from .pagination import ProjectIterator, SafeProjectIterator, iterate_pages, stream_projects


logger = logging.getLogger(__name__)


class ProjectQuery:
    """
    Builds and runs project searches

    Every setter returns the same instance, so queries compose fluently.
    The transport (NIHReporterClient) and the decoder (ProjectDecoder) are
    collaborators and can be replaced.

    Example:
        query = (
            ProjectQuery()
            .set_pi_profile_ids([10936793])
            .set_fiscal_years([2020, 2021])
            .set_use_relevance(True)
            .add_excluded_field("AbstractText")
        )
        projects = await query.execute()

        async for project in query.iterator():
            print(project.project_title)
    """

    def __init__(self, client: Optional[NIHReporterClient] = None, decoder: Optional[ProjectDecoder] = None):
        self.client = client or NIHReporterClient()
        self.decoder = decoder or ProjectDecoder()

        self._pi_profile_ids: List[int] = []
        self._fiscal_years: List[int] = []
        self._include_active_projects = True
        self._use_relevance = False
        self._excluded_fields: List[ProjectField] = []
        self._sort_field: Optional[ProjectField] = None
        self._sort_order: Optional[SortOrder] = None
        self._offset = 0
        self._limit = QueryConfig.DEFAULT_LIMIT

    # Filters

    def set_pi_profile_ids(self, pi_profile_ids: Iterable[int]) -> 'ProjectQuery':
        """Match projects associated with ANY of the given PI profile IDs"""
        self._pi_profile_ids = list(pi_profile_ids)
        return self

    def set_fiscal_years(self, fiscal_years: Iterable[int]) -> 'ProjectQuery':
        """Match projects in ANY of the given fiscal years"""
        self._fiscal_years = list(fiscal_years)
        return self

    def set_use_relevance(self, use_relevance: bool) -> 'ProjectQuery':
        """Rank the most closely matching projects first (default: False)"""
        self._use_relevance = use_relevance
        return self

    def set_include_active_projects(self, include_active_projects: bool) -> 'ProjectQuery':
        """Include active projects in the results (default: True)"""
        self._include_active_projects = include_active_projects
        return self

    # Field exclusion

    def set_excluded_fields(self, fields: Iterable[FieldLike]) -> 'ProjectQuery':
        """Replace the fields to leave out of the results (duplicates are dropped)"""
        self._excluded_fields = []
        for field in fields:
            self.add_excluded_field(field)
        return self

    def add_excluded_field(self, field: FieldLike) -> 'ProjectQuery':
        """Leave a field out of the results; adding it twice has no effect"""
        field = to_excludable_field(field)
        if field not in self._excluded_fields:
            self._excluded_fields.append(field)
        return self

    def remove_excluded_field(self, field: FieldLike) -> 'ProjectQuery':
        """Stop excluding a field; removing one that is not excluded has no effect"""
        field = to_field(field)
        self._excluded_fields = [f for f in self._excluded_fields if f is not field]
        return self

    # Pagination

    def set_limit(self, limit: int) -> 'ProjectQuery':
        """
        Set the page size

        Values <= 0 reset to 50 and values above 14999 are capped at 14999.
        """
        self._limit = clamp_limit(limit)
        return self

    def set_offset(self, offset: int) -> 'ProjectQuery':
        """Set the offset of the first record; negative values become 0"""
        self._offset = clamp_offset(offset)
        return self

    # Sorting

    def set_sort_field(self, field: FieldLike) -> 'ProjectQuery':
        """Sort by a field; the order defaults to ascending"""
        self._sort_field = to_field(field)
        return self

    def set_sort_order(self, order: Union[SortOrder, str]) -> 'ProjectQuery':
        """Set the sort order ('asc' or 'desc'); only sent when a sort field is set"""
        self._sort_order = to_sort_order(order)
        return self

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def excluded_fields(self) -> Tuple[ProjectField, ...]:
        return tuple(self._excluded_fields)

    # Terminals

    def build_criteria(self, offset: Optional[int] = None) -> SearchCriteria:
        """Snapshot the builder state as immutable SearchCriteria"""
        return SearchCriteria(
            pi_profile_ids=tuple(self._pi_profile_ids),
            fiscal_years=tuple(self._fiscal_years),
            include_active_projects=self._include_active_projects,
            use_relevance=self._use_relevance,
            excluded_fields=tuple(self._excluded_fields),
            sort_field=self._sort_field,
            sort_order=self._sort_order,
            offset=self._offset if offset is None else offset,
            limit=self._limit
        )

    def build_request_body(self) -> Dict[str, Any]:
        """Build the wire request body for the current state"""
        return self.build_criteria().to_request_body()

    async def fetch_page(self, criteria: SearchCriteria) -> List[Project]:
        """One transport round trip and one decode pass for the given criteria"""
        raw_text = await self.client.submit(criteria.to_request_body())
        return self.decoder.decode(raw_text)

    # Bulk access

    async def execute(self) -> List[Project]:
        """
        Fetch the page at the current limit and offset

        Returns:
            List of Project objects on that page

        Raises:
            TransportError: If the request or body read fails
            ApiError: If the API rejects the request
            ParseError: If any project on the page fails validation
        """
        return await self.fetch_page(self.build_criteria())

    async def execute_safe(self) -> Tuple[List[Project], Optional[Exception]]:
        """Like execute(), but returns (projects, error) instead of raising"""
        try:
            return await self.execute(), None
        except QueryError as e:
            logger.debug(f"Query failed: {e}")
            return [], e

    def execute_sync(self) -> List[Project]:
        """Synchronous wrapper around execute()"""
        return self.client.run_async(self.execute())

    # Paginated access

    def iterator(self, offset: Optional[int] = None) -> ProjectIterator:
        """
        Iterate over all matching projects, one page buffered at a time

        Args:
            offset: Offset to start from (default: the builder's offset)

        Errors abort the iteration and are raised to the caller.
        """
        return ProjectIterator(self.fetch_page, self.build_criteria(offset))

    def safe_iterator(self, offset: Optional[int] = None) -> SafeProjectIterator:
        """Iterate yielding (project, error) pairs; stops after the first error"""
        return SafeProjectIterator(self.iterator(offset))

    def pages(self, offset: Optional[int] = None) -> AsyncIterator[List[Project]]:
        """Yield whole pages until a short page ends the results"""
        return iterate_pages(self.fetch_page, self.build_criteria(offset))

    def stream(self, offset: Optional[int] = None) -> AsyncIterator[Project]:
        """Yield every matching project by concatenating pages"""
        return stream_projects(self.fetch_page, self.build_criteria(offset))

    async def fetch_all(self, offset: Optional[int] = None) -> List[Project]:
        """Collect every matching project into a list"""
        return [project async for project in self.stream(offset)]

    def fetch_all_sync(self, offset: Optional[int] = None) -> List[Project]:
        """Synchronous wrapper around fetch_all()"""
        return self.client.run_async(self.fetch_all(offset))
