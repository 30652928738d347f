"""
Canvas REST API client.

Issues bearer-authenticated GET requests against the Canvas API and
decodes the JSON responses into typed records.
"""

import logging
from typing import Any, List, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

from canvas_bot.config import Settings, get_settings
from canvas_bot.models import Assignment, Course

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

FAVORITE_COURSES_PATH = "/users/self/favorites/courses"
ASSIGNMENTS_PATH = "/courses/{course_id}/assignments"


class CanvasFetchError(Exception):
    """Raised when Canvas answers with a non-success status or is unreachable."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CanvasDecodeError(Exception):
    """Raised when a Canvas response body cannot be decoded."""
    pass


class CanvasClient:
    """
    Authenticated client for the Canvas REST API.

    Only the first page of any listing is read. Canvas paginates with
    Link headers; the per_page parameter enlarges that first page.
    """

    def __init__(
        self,
        api_token: Optional[str] = None,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize Canvas client.

        Args:
            api_token: Canvas API token, defaults to CANVAS_API_KEY
            settings: Optional settings instance, will use default if not provided
            session: Optional requests session (used by tests)
        """
        self.settings = settings or get_settings()
        self.api_url = self.settings.canvas_api_url
        self.per_page = self.settings.canvas_per_page
        self.timeout = self.settings.request_timeout

        token = api_token or self.settings.canvas_api_key
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        })

    def _get_url(self, path: str) -> str:
        """Build full URL from an API path."""
        return f"{self.api_url}{path}"

    def get_json(self, path: str, params: Optional[dict] = None) -> Any:
        """
        Make authenticated GET request and return parsed JSON.

        Args:
            path: API path (e.g., "/users/self/favorites/courses")
            params: Optional query parameters

        Returns:
            Parsed JSON body

        Raises:
            CanvasFetchError: On transport failure or non-2xx status
            CanvasDecodeError: If the body is not valid JSON
        """
        url = self._get_url(path)
        query = {"per_page": self.per_page}
        if params:
            query.update(params)

        try:
            response = self.session.get(url, params=query, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise CanvasFetchError(f"Request to {path} failed: {e}") from e

        if not response.ok:
            raise CanvasFetchError(
                f"Failed to fetch {path}: {response.status_code} {response.reason}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise CanvasDecodeError(f"Malformed JSON from {path}: {e}") from e

    def _get_list(
        self,
        path: str,
        model: Type[ModelT],
        params: Optional[dict] = None,
    ) -> List[ModelT]:
        """GET a listing endpoint and validate it as a list of `model`."""
        data = self.get_json(path, params=params)
        try:
            return TypeAdapter(List[model]).validate_python(data)
        except ValidationError as e:
            raise CanvasDecodeError(
                f"Unexpected {model.__name__} payload from {path}: {e}"
            ) from e

    def fetch_course_ids(self) -> List[int]:
        """
        Get the identifiers of the caller's favorited courses.

        Returns:
            List[int]: Course identifiers
        """
        courses = self._get_list(FAVORITE_COURSES_PATH, Course)
        course_ids = [course.id for course in courses]
        logger.info(f"Favorited course ids: {course_ids}")
        return course_ids

    def fetch_courses(self) -> List[Course]:
        """
        Get favorited courses including enrollment score data.

        Returns:
            List[Course]: Courses with their enrollments
        """
        return self._get_list(
            FAVORITE_COURSES_PATH,
            Course,
            params={"include[]": "total_scores"},
        )

    def fetch_assignments(self, course_id: int) -> List[Assignment]:
        """
        Get assignments for a single course.

        Args:
            course_id: Canvas course identifier

        Returns:
            List[Assignment]: Assignments of the course
        """
        assignments = self._get_list(
            ASSIGNMENTS_PATH.format(course_id=course_id),
            Assignment,
        )
        logger.debug(f"Fetched {len(assignments)} assignments for course {course_id}")
        return assignments
