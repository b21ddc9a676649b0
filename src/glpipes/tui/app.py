"""Main glpipes TUI application."""

import logging
from typing import Optional

from textual.app import App
from textual.binding import Binding
from textual.screen import Screen

from glpipes.clients import GitLabError
from glpipes.navigator import (
    BranchChosen,
    BranchPicker,
    Event,
    GroupProjectTree,
    JobAction,
    JobActionChosen,
    JobActionPicker,
    JobList,
    JobSelected,
    LogView,
    Navigator,
    NodeSelected,
    PipelineList,
    PipelineSelected,
    ScreenState,
    Startup,
)
from glpipes.tui.screens import (
    BranchPickerScreen,
    GroupTreeScreen,
    HelpScreen,
    JobActionScreen,
    JobListScreen,
    LogViewScreen,
    PipelineListScreen,
)


_log = logging.getLogger("glpipes")


class PipelinesApp(App):
    """Terminal browser for GitLab groups, pipelines and jobs.

    Every widget callback becomes a navigator event. After each event the
    navigator's current state decides what is on screen: a new state object
    replaces the displayed screen, an unchanged one leaves it alone.
    """

    TITLE = "GitLab Pipelines"
    ENABLE_COMMAND_PALETTE = False

    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("question_mark", "help", "Help", key_display="?"),
    ]

    def __init__(self, navigator: Navigator, url: Optional[str] = None):
        super().__init__()
        self.navigator = navigator
        self.navigator.report = self._report_error
        self.navigator.notice = self._report_notice
        self._shown: Optional[ScreenState] = None
        if url:
            self.sub_title = url

    def on_mount(self) -> None:
        if not self.navigator.started:
            try:
                self.navigator.dispatch(Startup())
            except GitLabError as e:
                _log.error("startup failed: %s", e)
                self.exit(return_code=1, message=f"Error fetching groups: {e}")
                return
        self._show(self.navigator.screen)

    @property
    def shown_state(self) -> Optional[ScreenState]:
        """The navigator state currently on screen."""
        return self._shown

    def handle(self, event: Event) -> None:
        """Feed one event to the navigator and render the result."""
        self._show(self.navigator.dispatch(event))

    def _show(self, state: Optional[ScreenState]) -> None:
        if state is None:
            return

        if state is self._shown:
            if isinstance(self.screen, BranchPickerScreen):
                self.screen.refocus()
            return

        if isinstance(state, JobActionPicker):
            # Shown over the job list, which stays underneath.
            self.push_screen(JobActionScreen(state.job), self._on_job_action)
            self._shown = state
            return

        if isinstance(self._shown, JobActionPicker) and state is self._shown.origin:
            # The action modal dismissed itself; the job list is on top again.
            self._shown = state
            return

        view = self._build_view(state)
        if self._shown is None:
            self.push_screen(view)
        else:
            self.switch_screen(view)
        self._shown = state

    def _build_view(self, state: ScreenState) -> Screen:
        if isinstance(state, GroupProjectTree):
            return GroupTreeScreen(state, lambda ref: self.handle(NodeSelected(ref)))
        if isinstance(state, BranchPicker):
            return BranchPickerScreen(state, lambda index: self.handle(BranchChosen(index)))
        if isinstance(state, PipelineList):
            return PipelineListScreen(state, lambda index: self.handle(PipelineSelected(index)))
        if isinstance(state, JobList):
            return JobListScreen(state, lambda index: self.handle(JobSelected(index)))
        if isinstance(state, LogView):
            return LogViewScreen(state)
        raise TypeError(f"No screen for {type(state).__name__}")

    def _on_job_action(self, result: Optional[str]) -> None:
        action = JobAction(result) if result else JobAction.CANCEL
        self.handle(JobActionChosen(action))

    def _report_error(self, message: str) -> None:
        _log.error("%s", message)
        self.notify(message, title="GitLab error", severity="error", timeout=8)

    def _report_notice(self, message: str) -> None:
        _log.info("%s", message)
        self.notify(message)

    def action_help(self) -> None:
        self.push_screen(HelpScreen())


def run_tui(navigator: Navigator, url: Optional[str] = None) -> Optional[int]:
    """Run the app until the user quits and return its return code."""
    app = PipelinesApp(navigator, url=url)
    app.run()
    return app.return_code
