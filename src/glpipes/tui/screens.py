"""Screens for the glpipes TUI, one per navigator state."""

from datetime import datetime
from typing import Callable, Optional

from rich.text import Text
from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, DataTable, Footer, Header, Label, Markdown, TextArea, Tree

from glpipes.models import GroupRef, Job, NodeRef, ProjectRef
from glpipes.navigator import (
    BranchPicker,
    GroupProjectTree,
    JobAction,
    JobList,
    LogView,
    PipelineList,
)


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def status_style(status: str) -> str:
    """Rich style for a pipeline or job status."""
    if status == "success":
        return "bold #a6e3a1"
    if status in ("failed", "canceled"):
        return "bold #f38ba8"
    if status in ("running", "pending", "created", "preparing", "waiting_for_resource"):
        return "bold #f9e2af"
    return "dim"


def status_cell(status: str) -> Text:
    return Text(status, style=status_style(status))


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime(TIMESTAMP_FORMAT)


class GroupTreeScreen(Screen):
    """Tree of groups with their projects."""

    def __init__(
        self,
        state: GroupProjectTree,
        on_select: Callable[[Optional[NodeRef]], None],
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.screen_state = state
        self.on_select = on_select

    def compose(self) -> ComposeResult:
        yield Header()
        yield Tree(Text("GitLab Pipelines", style="bold yellow"), id="group-tree")
        yield Footer()

    def on_mount(self) -> None:
        tree = self.query_one("#group-tree", Tree)
        tree.root.expand()
        groups_node = tree.root.add(Text("Groups", style="yellow"), expand=True)
        for node in self.screen_state.groups:
            # Added as a branch even when empty so it still reads as a group.
            group_node = groups_node.add(
                f"Group: {node.group.name}",
                data=GroupRef(node.group.id),
                expand=True,
            )
            for project in node.projects:
                group_node.add_leaf(
                    Text(f"Project: {project.name}", style="#89b4fa"),
                    data=ProjectRef(project.id),
                )
        tree.focus()

    @on(Tree.NodeSelected, "#group-tree")
    def on_group_tree_selected(self, event: Tree.NodeSelected) -> None:
        self.on_select(event.node.data)


class BranchPickerScreen(ModalScreen):
    """Modal listing a project's branches plus Cancel.

    Buttons report their index; the modal only goes away when the app
    replaces it.
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    CSS = """
    BranchPickerScreen {
        align: center middle;
    }

    #branch-dialog {
        width: 60;
        max-width: 90%;
        height: auto;
        max-height: 80%;
        padding: 1 2;
        background: $surface;
        border: tall $primary;
    }

    #branch-title {
        text-align: center;
        text-style: bold;
        width: 100%;
        margin-bottom: 1;
    }

    #branch-buttons Button {
        width: 100%;
        margin-bottom: 1;
    }
    """

    def __init__(self, state: BranchPicker, on_choose: Callable[[int], None], **kwargs):
        super().__init__(**kwargs)
        self.screen_state = state
        self.on_choose = on_choose

    def compose(self) -> ComposeResult:
        with Vertical(id="branch-dialog"):
            yield Label("Select Branch", id="branch-title")
            with VerticalScroll(id="branch-buttons"):
                for index, branch in enumerate(self.screen_state.branches):
                    yield Button(branch.name, id=f"branch-{index}", classes="branch-button")
                yield Button("Cancel", id="branch-cancel", variant="error")

    def on_mount(self) -> None:
        self.refocus()

    def refocus(self) -> None:
        """Put focus back on the first button of the dialog."""
        self.query(Button).first().focus()

    @on(Button.Pressed, ".branch-button")
    def on_branch_pressed(self, event: Button.Pressed) -> None:
        self.on_choose(int(event.button.id.removeprefix("branch-")))

    @on(Button.Pressed, "#branch-cancel")
    def on_cancel_pressed(self) -> None:
        self.on_choose(self.screen_state.cancel_index)

    def action_cancel(self) -> None:
        self.on_choose(self.screen_state.cancel_index)


class PipelineListScreen(Screen):
    """Pipelines of one project for one ref."""

    def __init__(self, state: PipelineList, on_select: Callable[[int], None], **kwargs):
        super().__init__(**kwargs)
        self.screen_state = state
        self.on_select = on_select

    def compose(self) -> ComposeResult:
        yield Header()
        yield Label(f"Pipelines for {self.screen_state.ref}", id="pipelines-title")
        yield DataTable(id="pipelines-table", cursor_type="row", zebra_stripes=True)
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#pipelines-table", DataTable)
        table.add_columns("Pipeline ID", "Status", "Ref", "Source", "Updated At")
        for pipeline in self.screen_state.pipelines:
            table.add_row(
                str(pipeline.id),
                status_cell(pipeline.status),
                pipeline.ref,
                pipeline.source,
                format_timestamp(pipeline.updated_at),
                key=str(pipeline.id),
            )
        table.focus()

    @on(DataTable.RowSelected, "#pipelines-table")
    def on_pipelines_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self.on_select(event.cursor_row)


class JobListScreen(Screen):
    """Jobs of one pipeline."""

    def __init__(self, state: JobList, on_select: Callable[[int], None], **kwargs):
        super().__init__(**kwargs)
        self.screen_state = state
        self.on_select = on_select

    def compose(self) -> ComposeResult:
        yield Header()
        yield Label(f"Jobs for pipeline {self.screen_state.pipeline_id}", id="jobs-title")
        yield DataTable(id="jobs-table", cursor_type="row", zebra_stripes=True)
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#jobs-table", DataTable)
        table.add_columns("Job ID", "Name", "Stage", "Status")
        for job in self.screen_state.jobs:
            table.add_row(
                str(job.id),
                job.name,
                job.stage or "",
                status_cell(job.status),
                key=str(job.id),
            )
        table.focus()

    @on(DataTable.RowSelected, "#jobs-table")
    def on_jobs_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self.on_select(event.cursor_row)


ACTION_BUTTONS = [
    (JobAction.LOGS, "primary"),
    (JobAction.RETRY, "warning"),
    (JobAction.CANCEL, "default"),
]


class JobActionScreen(ModalScreen[Optional[str]]):
    """Logs / Retry / Cancel for one job."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    CSS = """
    JobActionScreen {
        align: center middle;
    }

    #action-dialog {
        width: 50;
        max-width: 80%;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: tall $primary;
    }

    #action-title {
        text-align: center;
        text-style: bold;
        width: 100%;
        margin-bottom: 1;
    }

    #action-buttons {
        width: 100%;
        height: auto;
        align-horizontal: center;
    }

    #action-buttons Button {
        margin: 0 1;
    }
    """

    def __init__(self, job: Job, **kwargs):
        super().__init__(**kwargs)
        self.job = job

    def compose(self) -> ComposeResult:
        with Vertical(id="action-dialog"):
            yield Label(f"Select Action for Job {self.job.id}", id="action-title")
            with Horizontal(id="action-buttons"):
                for action, variant in ACTION_BUTTONS:
                    yield Button(
                        action.value,
                        id=f"action-{action.name.lower()}",
                        variant=variant,
                        classes="action-button",
                    )

    @on(Button.Pressed, ".action-button")
    def on_action_pressed(self, event: Button.Pressed) -> None:
        name = event.button.id.removeprefix("action-").upper()
        self.dismiss(JobAction[name].value)

    def action_cancel(self) -> None:
        self.dismiss(JobAction.CANCEL.value)


class LogViewScreen(Screen):
    """Read-only, scrollable job log."""

    def __init__(self, state: LogView, **kwargs):
        super().__init__(**kwargs)
        self.screen_state = state

    def compose(self) -> ComposeResult:
        yield Header()
        yield Label(f"Log for job {self.screen_state.job_id}", id="log-title")
        yield TextArea(self.screen_state.text, read_only=True, soft_wrap=True, id="log-view")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#log-view", TextArea).focus()


HELP_TEXT = """\
# GitLab Pipelines

Browse groups, projects, pipelines and jobs.

| Key | Action |
| --- | --- |
| `Enter` | Select the highlighted project, pipeline or job |
| `Up` / `Down` | Move the cursor |
| `Escape` | Cancel the open dialog |
| `?` | Show this help |
| `q` | Quit |

Selecting a project asks for a branch, then lists that branch's
pipelines. Selecting a job offers **Logs**, **Retry** and **Cancel**.
Retrying does not refresh the job list.
"""


class HelpScreen(ModalScreen):
    """Help screen."""

    CSS = """
    HelpScreen {
        align: center middle;
    }

    #help-dialog {
        width: 70;
        height: 80%;
        padding: 1 2;
        background: $surface;
        border: solid $primary;
    }

    #help-scroll {
        height: 1fr;
    }

    #help-dialog Button {
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("question_mark", "close", "Close", show=False),
    ]

    def compose(self) -> ComposeResult:
        with Vertical(id="help-dialog"):
            with VerticalScroll(id="help-scroll"):
                yield Markdown(HELP_TEXT)
            yield Button("Close", id="close-btn")

    @on(Button.Pressed, "#close-btn")
    def on_close(self) -> None:
        self.dismiss()

    def action_close(self) -> None:
        self.dismiss()
