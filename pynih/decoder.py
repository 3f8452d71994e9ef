"""
Decoding of project search responses into Project records
"""

import json
import logging
from typing import Any, List

from pydantic import ValidationError

from .exceptions import ApiError, ParseError
from .models import Project
from .schema import ProjectPayload


logger = logging.getLogger(__name__)


def format_validation_errors(error: ValidationError) -> List[str]:
    """Render every field-level violation as 'path: message'"""
    lines = []
    for item in error.errors():
        path = ".".join(str(part) for part in item.get('loc', ())) or "<root>"
        lines.append(f"{path}: {item.get('msg', 'invalid value')}")
    return lines


def _rejection_message(data: Any) -> str:
    """Pull the error message out of a rejected-request envelope"""
    if isinstance(data, list) and data:
        first = data[0]
        if isinstance(first, dict):
            return str(first.get('message') or first.get('err_msg') or first)
        return str(first)
    if isinstance(data, dict):
        return str(data.get('message') or data.get('err_msg') or "response has no results list")
    return "response has no results list"


class ProjectDecoder:
    """
    Turns the raw text of a search response into Project records

    The decoder is pure: the same text always yields equal records.
    """

    def decode(self, raw_text: str, status: int = 200) -> List[Project]:
        """
        Decode a search response

        Args:
            raw_text: Response body as text
            status: HTTP status the body arrived with (reported on envelope errors)

        Returns:
            List of Project objects for the page

        Raises:
            ParseError: If the body is not JSON or a project fails validation
            ApiError: If the envelope signals an upstream rejection
        """
        try:
            data = json.loads(raw_text)
        except json.JSONDecodeError as e:
            raise ParseError(raw_text, [f"<root>: invalid JSON ({e.msg})"], cause=e) from e

        results = data.get('results') if isinstance(data, dict) else None
        if not isinstance(results, list):
            message = _rejection_message(data)
            raise ApiError(status, f"NIH API err_msg: {message}", retriable=False, cause=data)

        projects = [self.decode_project(item) for item in results]
        logger.debug(f"Decoded {len(projects)} projects")
        return projects

    def decode_project(self, item: Any) -> Project:
        """
        Validate and normalize a single element of 'results'

        Raises:
            ParseError: With the offending element and every violation found
        """
        raw_item = json.dumps(item)
        try:
            payload = ProjectPayload.model_validate_json(raw_item)
        except ValidationError as e:
            errors = format_validation_errors(e)
            logger.warning(f"Project failed validation with {len(errors)} error(s)")
            raise ParseError(raw_item, errors, cause=e) from e
        return Project.from_payload(payload)
