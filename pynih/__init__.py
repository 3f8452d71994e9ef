"""
PyNIH - Python interface for the NIH RePORTER API

This package provides a clean, object-oriented interface to search projects
through the NIH RePORTER API at https://api.reporter.nih.gov

Main classes:
- ProjectQuery: Builder for project searches (execute, iterate, stream)
- NIHReporterClient: HTTP transport with retry of transient failures
- ProjectDecoder: Validates and normalizes search responses
- Project: Represents a project/award
- Organization: Represents the awardee organization
- Person: Represents a principal investigator

Usage:
    import asyncio
    from pynih import ProjectQuery

    async def main():
        query = ProjectQuery().set_pi_profile_ids([10936793]).set_fiscal_years([2020, 2021])
        async with query.client:
            async for project in query.iterator():
                print(project.project_title)
    asyncio.run(main())
"""

from .client import NIHReporterClient
from .criteria import SearchCriteria
from .decoder import ProjectDecoder
from .exceptions import ApiError, NIHApiError, NIHReporterError, ParseError, QueryError, TransportError
from .fields import ProjectField, SortOrder
from .models import Organization, Person, Project
from .pagination import IteratorState, ProjectIterator, SafeProjectIterator
from .query import ProjectQuery

__version__ = "0.1.0"
__all__ = [
    "ProjectQuery",
    "NIHReporterClient",
    "ProjectDecoder",
    "SearchCriteria",
    "ProjectField",
    "SortOrder",
    "Project",
    "Organization",
    "Person",
    "ProjectIterator",
    "SafeProjectIterator",
    "IteratorState",
    "NIHReporterError",
    "QueryError",
    "NIHApiError",
    "ApiError",
    "ParseError",
    "TransportError",
]
