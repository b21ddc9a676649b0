"""GitLab REST API client for glpipes.

This module provides the calls the pipeline browser needs:
- List groups and the projects of a group
- List a project's branches and its pipelines for a ref
- List a pipeline's jobs, fetch a job log, retry a job

Only the first page of each listing is fetched.
"""

import logging
from typing import Any, Optional, TypeVar

import httpx

from glpipes.config import DEFAULT_GITLAB_URL, DEFAULT_TIMEOUT, API_PATH
from glpipes.models import Branch, Group, Job, Pipeline, Project


_log = logging.getLogger("glpipes")

T = TypeVar("T")


class GitLabError(Exception):
    """Any failed GitLab call: transport error, error status or bad payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GitLabClient:
    """Client for interacting with the GitLab v4 API."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_GITLAB_URL + API_PATH,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize GitLab client.

        Args:
            token: Personal access token sent as PRIVATE-TOKEN.
            base_url: API base, e.g. https://gitlab.com/api/v4
            timeout: Request timeout in seconds.

        Raises:
            GitLabError: If base_url is not an absolute http(s) URL.
        """
        try:
            url = httpx.URL(base_url)
        except httpx.InvalidURL as e:
            raise GitLabError(f"Invalid GitLab URL {base_url!r}: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise GitLabError(f"Invalid GitLab URL {base_url!r}")

        self.token = token
        self.base_url = str(url).rstrip("/")
        self.timeout = timeout
        self._client: Optional[httpx.Client] = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                headers={
                    "PRIVATE-TOKEN": self.token,
                    "User-Agent": "glpipes",
                },
                timeout=self.timeout,
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "GitLabClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Make a request, mapping every failure to GitLabError."""
        _log.debug("%s %s %s", method, url, kwargs.get("params") or "")
        try:
            response = self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise GitLabError(
                f"{method} {url} failed: {status} {_error_detail(e.response)}",
                status_code=status,
            ) from e
        except httpx.HTTPError as e:
            raise GitLabError(f"{method} {url} failed: {e}") from e
        return response

    def _get_json(self, url: str, **kwargs) -> Any:
        response = self._request("GET", url, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise GitLabError(f"GET {url} returned invalid JSON") from e

    def _get_list(self, url: str, model: type[T], **kwargs) -> list[T]:
        """GET a JSON array and build one model per object in it."""
        data = self._get_json(url, **kwargs)
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise GitLabError(f"GET {url} returned an unexpected payload")
        try:
            return [model.from_api(item) for item in data]
        except (AttributeError, KeyError, TypeError) as e:
            raise GitLabError(f"GET {url} returned an unexpected payload") from e

    def list_groups(self) -> list[Group]:
        """List groups visible to the token."""
        return self._get_list("/groups", Group)

    def list_group_projects(self, group_id: int) -> list[Project]:
        """List projects belonging to a group."""
        return self._get_list(f"/groups/{group_id}/projects", Project)

    def list_branches(self, project_id: int) -> list[Branch]:
        """List a project's repository branches."""
        return self._get_list(f"/projects/{project_id}/repository/branches", Branch)

    def list_pipelines(self, project_id: int, ref: str) -> list[Pipeline]:
        """List a project's pipelines for a branch or tag."""
        return self._get_list(
            f"/projects/{project_id}/pipelines",
            Pipeline,
            params={"ref": ref},
        )

    def list_pipeline_jobs(self, project_id: int, pipeline_id: int) -> list[Job]:
        """List the jobs of one pipeline."""
        return self._get_list(f"/projects/{project_id}/pipelines/{pipeline_id}/jobs", Job)

    def get_job_log(self, project_id: int, job_id: int) -> str:
        """Fetch a job's raw log (trace) text.

        Traces are decoded as UTF-8; bytes that are not valid UTF-8 come back
        as backslash escapes rather than replacement characters.
        """
        response = self._request("GET", f"/projects/{project_id}/jobs/{job_id}/trace")
        return response.content.decode("utf-8", errors="backslashreplace")

    def retry_job(self, project_id: int, job_id: int) -> None:
        """Retry a job. The new job's status is not checked."""
        self._request("POST", f"/projects/{project_id}/jobs/{job_id}/retry")


def _error_detail(response: httpx.Response) -> str:
    """Best-effort error text from a GitLab error response."""
    try:
        data = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(data, dict):
        message = data.get("message") or data.get("error")
        if message:
            return str(message)
    return response.reason_phrase
