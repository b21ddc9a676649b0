"""Shared fixtures for glpipes tests."""

from datetime import datetime, timezone

import pytest

from glpipes.clients import GitLabError
from glpipes.models import Branch, Group, Job, Pipeline, Project


class FakeGitLab:
    """In-memory stand-in for GitLabClient that records every call."""

    def __init__(self):
        self.groups: list[Group] = []
        self.projects: dict[int, list[Project]] = {}
        self.branches: dict[int, list[Branch]] = {}
        self.pipelines: dict[tuple[int, str], list[Pipeline]] = {}
        self.jobs: dict[tuple[int, int], list[Job]] = {}
        self.logs: dict[tuple[int, int], str] = {}
        self.calls: list[tuple] = []
        self.failing: set[str] = set()

    def _call(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.failing:
            raise GitLabError(f"{name} failed: 500 Internal Server Error", status_code=500)

    def calls_to(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    def list_groups(self) -> list[Group]:
        self._call("list_groups")
        return list(self.groups)

    def list_group_projects(self, group_id: int) -> list[Project]:
        self._call("list_group_projects", group_id)
        return list(self.projects.get(group_id, []))

    def list_branches(self, project_id: int) -> list[Branch]:
        self._call("list_branches", project_id)
        return list(self.branches.get(project_id, []))

    def list_pipelines(self, project_id: int, ref: str) -> list[Pipeline]:
        self._call("list_pipelines", project_id, ref)
        return list(self.pipelines.get((project_id, ref), []))

    def list_pipeline_jobs(self, project_id: int, pipeline_id: int) -> list[Job]:
        self._call("list_pipeline_jobs", project_id, pipeline_id)
        return list(self.jobs.get((project_id, pipeline_id), []))

    def get_job_log(self, project_id: int, job_id: int) -> str:
        self._call("get_job_log", project_id, job_id)
        return self.logs[(project_id, job_id)]

    def retry_job(self, project_id: int, job_id: int) -> None:
        self._call("retry_job", project_id, job_id)


@pytest.fixture
def fake_gitlab() -> FakeGitLab:
    """Group "Infra" with projects api/web, one pipeline and one job on api@dev."""
    fake = FakeGitLab()
    fake.groups = [Group(id=1, name="Infra"), Group(id=2, name="Empty")]
    fake.projects = {
        1: [Project(id=11, name="api", group_id=1), Project(id=12, name="web", group_id=1)],
        2: [],
    }
    fake.branches = {11: [Branch("main"), Branch("dev")], 12: []}
    fake.pipelines = {
        (11, "dev"): [
            Pipeline(
                id=10,
                status="success",
                ref="dev",
                source="push",
                updated_at=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
            ),
        ],
    }
    fake.jobs = {(11, 10): [Job(id=99, name="build", status="failed", pipeline_id=10)]}
    fake.logs = {(11, 99): "Running build...\nERROR: exit code 1\n"}
    return fake
