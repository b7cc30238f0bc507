"""GitLab REST API client: group/project listing and CI/CD variables."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar
from urllib.parse import quote

import requests

from ..utils.errors import PlatformError, create_error_suggestions

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Group:
    """A GitLab group."""

    id: int
    full_path: str


@dataclass(frozen=True)
class Project:
    """A GitLab project, identified by numeric id and namespaced path."""

    id: int
    path_with_namespace: str


class GitLabPlatform:
    """Thin wrapper over the parts of the GitLab v4 API that vglink uses."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        per_page: int = 100,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: API root, e.g. https://gitlab.com/api/v4
            token: Personal or group access token with api scope
            timeout: Per-request timeout in seconds
            per_page: Page size for list calls
            session: Optional pre-configured requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.per_page = per_page
        self.session = session or requests.Session()
        self.session.headers.update({"PRIVATE-TOKEN": token})

    def list_groups(self) -> List[Group]:
        """List every group visible to the token."""
        return self._collect("/groups", lambda item: Group(id=item["id"], full_path=item.get("full_path", "")))

    def list_projects(self, group: Group) -> List[Project]:
        """List the projects that belong directly to ``group``."""
        return self._collect(
            f"/groups/{group.id}/projects",
            lambda item: Project(id=item["id"], path_with_namespace=item["path_with_namespace"]),
        )

    def update_variable(self, project_id: int, name: str, value: str) -> None:
        """
        Overwrite an existing CI/CD variable.

        Raises:
            PlatformError: If the variable does not exist or the call fails
        """
        self._request(
            "PUT",
            f"/projects/{project_id}/variables/{quote(name, safe='')}",
            data={"value": value},
        )

    def create_variable(self, project_id: int, name: str, value: str) -> None:
        """
        Create a CI/CD variable.

        Raises:
            PlatformError: If the call fails
        """
        self._request(
            "POST",
            f"/projects/{project_id}/variables",
            data={"key": name, "value": value},
        )

    def _collect(self, path: str, build: Callable[[Dict[str, Any]], T]) -> List[T]:
        try:
            return [build(item) for item in self._paginate(path)]
        except (KeyError, TypeError) as e:
            raise PlatformError(f"Malformed item in GitLab response for GET {path}", details=repr(e)) from e

    def _paginate(self, path: str, params: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        """Yield every item of a list endpoint, following ``X-Next-Page``."""
        page: Optional[str] = "1"
        while page:
            query = dict(params or {})
            query.update({"per_page": self.per_page, "page": page})
            response = self._request("GET", path, params=query)
            try:
                items = response.json()
            except ValueError as e:
                raise PlatformError(
                    f"GitLab returned a non-JSON body for GET {path}",
                    details=response.text[:500],
                    suggestions=["Check that GITLAB_BASE_URL points at the API root, e.g. https://gitlab.com/api/v4"],
                ) from e
            if not isinstance(items, list):
                raise PlatformError(f"GitLab returned an unexpected body for GET {path}", details=str(items)[:500])
            yield from items
            page = response.headers.get("X-Next-Page") or None

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise PlatformError(f"GitLab request failed: {method} {path}", details=str(e)) from e

        if response.status_code >= 400:
            suggestions = []
            if response.status_code in (401, 403):
                suggestions = create_error_suggestions("gitlab_unauthorized")
            raise PlatformError(
                f"GitLab returned {response.status_code} for {method} {path}",
                status_code=response.status_code,
                details=response.text[:500],
                suggestions=suggestions,
            )

        logger.debug("%s %s -> %s", method, path, response.status_code)
        return response
