"""
Pagination over project search results

Pages are fetched strictly one after another: each request's offset is the
previous offset plus the page size, and a page shorter than the page size
ends the sequence.
"""

import logging
from collections import deque
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable, Deque, List, Optional, Tuple

from .criteria import SearchCriteria
from .exceptions import QueryError
from .models import Project


logger = logging.getLogger(__name__)

PageFetcher = Callable[[SearchCriteria], Awaitable[List[Project]]]


class IteratorState(Enum):
    FETCHING_PAGE = "fetching_page"
    EMITTING_BUFFERED = "emitting_buffered"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class ProjectIterator:
    """
    Lazy, forward-only iterator over every project matching the criteria

    Buffers one page at a time. Any error while fetching or decoding a page
    is raised to the caller and ends the iteration; the iterator cannot be
    restarted.
    """

    def __init__(self, fetch_page: PageFetcher, criteria: SearchCriteria):
        self._fetch_page = fetch_page
        self._criteria = criteria
        self._offset = criteria.offset
        self._buffer: Deque[Project] = deque()
        self._last_page_full = False
        self.state = IteratorState.FETCHING_PAGE
        self.pages_fetched = 0

    @property
    def offset(self) -> int:
        """Offset of the next page request"""
        return self._offset

    def __aiter__(self) -> 'ProjectIterator':
        return self

    async def __anext__(self) -> Project:
        while True:
            if self.state is IteratorState.EMITTING_BUFFERED:
                if self._buffer:
                    return self._buffer.popleft()
                if self._last_page_full:
                    self.state = IteratorState.FETCHING_PAGE
                else:
                    self.state = IteratorState.EXHAUSTED
            elif self.state is IteratorState.FETCHING_PAGE:
                await self._fetch_next_page()
            else:
                raise StopAsyncIteration

    async def _fetch_next_page(self):
        limit = self._criteria.limit
        criteria = self._criteria.with_offset(self._offset)
        logger.debug(f"Fetching page at offset {criteria.offset} (limit {limit})")
        try:
            page = await self._fetch_page(criteria)
        except Exception:
            self.state = IteratorState.FAILED
            raise

        self.pages_fetched += 1
        self._offset += limit

        if not page:
            self.state = IteratorState.EXHAUSTED
            return

        self._buffer.extend(page)
        self._last_page_full = len(page) >= limit
        self.state = IteratorState.EMITTING_BUFFERED


class SafeProjectIterator:
    """
    Non-raising variant of ProjectIterator

    Yields (project, None) for each project. On failure it yields
    (None, error) once and then stops; no further pages are requested.
    """

    def __init__(self, inner: ProjectIterator):
        self._inner = inner
        self._done = False

    @property
    def state(self) -> IteratorState:
        return self._inner.state

    def __aiter__(self) -> 'SafeProjectIterator':
        return self

    async def __anext__(self) -> Tuple[Optional[Project], Optional[Exception]]:
        if self._done:
            raise StopAsyncIteration
        try:
            project = await self._inner.__anext__()
        except StopAsyncIteration:
            self._done = True
            raise
        except QueryError as e:
            logger.debug(f"Safe iteration stopped on {type(e).__name__}: {e}")
            self._done = True
            return None, e
        return project, None


async def iterate_pages(fetch_page: PageFetcher, criteria: SearchCriteria) -> AsyncIterator[List[Project]]:
    """
    Yield non-empty pages until a short page signals the end of results
    """
    offset = criteria.offset
    while True:
        logger.debug(f"Fetching page at offset {offset} (limit {criteria.limit})")
        page = await fetch_page(criteria.with_offset(offset))
        if page:
            yield page
        if len(page) < criteria.limit:
            return
        offset += criteria.limit


async def stream_projects(fetch_page: PageFetcher, criteria: SearchCriteria) -> AsyncIterator[Project]:
    """Concatenate pages into a single stream of projects"""
    async for page in iterate_pages(fetch_page, criteria):
        for project in page:
            yield project
