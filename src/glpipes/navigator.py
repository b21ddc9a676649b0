"""Navigation state machine for the pipeline browser.

The navigator owns the screen currently shown and the rules for moving
between screens. It knows nothing about the widget toolkit: the UI turns
widget callbacks into the event objects below, calls ``dispatch`` and renders
whatever state comes back.

Screens form a forward walk with no history:

    GroupProjectTree -> BranchPicker -> PipelineList -> JobList
                                                          |  ^
                                                          v  |
                                                   JobActionPicker -> LogView
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol, Union

from glpipes.clients import GitLabError
from glpipes.models import Branch, Group, Job, NodeRef, Pipeline, Project, ProjectRef


_log = logging.getLogger("glpipes")


class GitLabAPI(Protocol):
    """The client operations the navigator depends on."""

    def list_groups(self) -> list[Group]: ...

    def list_group_projects(self, group_id: int) -> list[Project]: ...

    def list_branches(self, project_id: int) -> list[Branch]: ...

    def list_pipelines(self, project_id: int, ref: str) -> list[Pipeline]: ...

    def list_pipeline_jobs(self, project_id: int, pipeline_id: int) -> list[Job]: ...

    def get_job_log(self, project_id: int, job_id: int) -> str: ...

    def retry_job(self, project_id: int, job_id: int) -> None: ...


# =============================================================================
# Screen states
# =============================================================================


@dataclass(frozen=True)
class GroupNode:
    """A group and the projects listed under it."""

    group: Group
    projects: tuple[Project, ...] = ()


@dataclass(frozen=True)
class GroupProjectTree:
    groups: tuple[GroupNode, ...] = ()


@dataclass(frozen=True)
class BranchPicker:
    project_id: int
    branches: tuple[Branch, ...] = ()

    @property
    def cancel_index(self) -> int:
        """Button index of Cancel, placed after the branch buttons."""
        return len(self.branches)


@dataclass(frozen=True)
class PipelineList:
    project_id: int
    ref: str
    pipelines: tuple[Pipeline, ...] = ()


@dataclass(frozen=True)
class JobList:
    project_id: int
    pipeline_id: int
    jobs: tuple[Job, ...] = ()


@dataclass(frozen=True)
class JobActionPicker:
    job: Job
    origin: JobList


@dataclass(frozen=True)
class LogView:
    project_id: int
    job_id: int
    text: str


ScreenState = Union[GroupProjectTree, BranchPicker, PipelineList, JobList, JobActionPicker, LogView]


# =============================================================================
# Events
# =============================================================================


class JobAction(str, Enum):
    """Buttons offered by the job action picker."""

    LOGS = "Logs"
    RETRY = "Retry"
    CANCEL = "Cancel"


@dataclass(frozen=True)
class Startup:
    pass


@dataclass(frozen=True)
class NodeSelected:
    ref: Optional[NodeRef] = None


@dataclass(frozen=True)
class BranchChosen:
    index: int


@dataclass(frozen=True)
class PipelineSelected:
    index: int


@dataclass(frozen=True)
class JobSelected:
    index: int


@dataclass(frozen=True)
class JobActionChosen:
    action: JobAction


Event = Union[Startup, NodeSelected, BranchChosen, PipelineSelected, JobSelected, JobActionChosen]


# =============================================================================
# Navigator
# =============================================================================


def _log_report(message: str) -> None:
    _log.warning("%s", message)


def _log_notice(message: str) -> None:
    _log.info("%s", message)


@dataclass
class Navigator:
    """Drives screen transitions from UI events and API responses.

    Args:
        api: Client used for every fetch.
        report: Called with the error message when a fetch fails.
        notice: Called with a confirmation once a retry has been sent.
    """

    api: GitLabAPI
    report: Callable[[str], None] = _log_report
    notice: Callable[[str], None] = _log_notice
    screen: Optional[ScreenState] = None

    @property
    def started(self) -> bool:
        return self.screen is not None

    def dispatch(self, event: Event) -> Optional[ScreenState]:
        """Apply one event and return the (possibly unchanged) current screen.

        A failed fetch leaves the screen as it was before the fetch began.
        Events that don't apply to the current screen are ignored.
        """
        _log.debug("dispatch %r on %s", event, type(self.screen).__name__)

        if isinstance(event, Startup):
            # Listing groups is the first contact with the server, so its
            # failure propagates to the caller.
            self.screen = self._build_tree()
            return self.screen

        screen = self.screen
        try:
            if isinstance(event, NodeSelected) and isinstance(screen, GroupProjectTree):
                self._on_node_selected(event.ref)
            elif isinstance(event, BranchChosen) and isinstance(screen, BranchPicker):
                self._on_branch_chosen(screen, event.index)
            elif isinstance(event, PipelineSelected) and isinstance(screen, PipelineList):
                self._on_pipeline_selected(screen, event.index)
            elif isinstance(event, JobSelected) and isinstance(screen, JobList):
                self._on_job_selected(screen, event.index)
            elif isinstance(event, JobActionChosen) and isinstance(screen, JobActionPicker):
                # The picker closes before anything is fetched.
                self.screen = screen.origin
                self._on_job_action(screen, event.action)
            else:
                _log.debug("ignored %r", event)
        except GitLabError as e:
            self.report(str(e))
        return self.screen

    def _build_tree(self) -> GroupProjectTree:
        groups = self.api.list_groups()
        nodes = []
        for group in groups:
            try:
                projects = tuple(self.api.list_group_projects(group.id))
            except GitLabError as e:
                self.report(f"Error fetching projects for group {group.name}: {e}")
                projects = ()
            nodes.append(GroupNode(group=group, projects=projects))
        return GroupProjectTree(groups=tuple(nodes))

    def _on_node_selected(self, ref: Optional[NodeRef]) -> None:
        if not isinstance(ref, ProjectRef):
            return
        branches = self.api.list_branches(ref.project_id)
        self.screen = BranchPicker(project_id=ref.project_id, branches=tuple(branches))

    def _on_branch_chosen(self, picker: BranchPicker, index: int) -> None:
        if not 0 <= index < len(picker.branches):
            # Cancel or dismissal keeps the same picker up.
            return
        ref = picker.branches[index].name
        pipelines = self.api.list_pipelines(picker.project_id, ref)
        self.screen = PipelineList(
            project_id=picker.project_id,
            ref=ref,
            pipelines=tuple(pipelines),
        )

    def _on_pipeline_selected(self, listing: PipelineList, index: int) -> None:
        if not 0 <= index < len(listing.pipelines):
            return
        pipeline = listing.pipelines[index]
        jobs = self.api.list_pipeline_jobs(listing.project_id, pipeline.id)
        self.screen = JobList(
            project_id=listing.project_id,
            pipeline_id=pipeline.id,
            jobs=tuple(jobs),
        )

    def _on_job_selected(self, listing: JobList, index: int) -> None:
        if not 0 <= index < len(listing.jobs):
            return
        self.screen = JobActionPicker(job=listing.jobs[index], origin=listing)

    def _on_job_action(self, picker: JobActionPicker, action: JobAction) -> None:
        job = picker.job
        project_id = picker.origin.project_id
        if action is JobAction.LOGS:
            text = self.api.get_job_log(project_id, job.id)
            self.screen = LogView(project_id=project_id, job_id=job.id, text=text)
        elif action is JobAction.RETRY:
            self.api.retry_job(project_id, job.id)
            self.notice(f"Job {job.id} retried")
