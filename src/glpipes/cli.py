"""Click CLI for glpipes."""

import logging
from typing import Optional

import click

from glpipes import __version__
from glpipes.clients import GitLabClient, GitLabError
from glpipes.config import LOG_FILE_ENV, ConfigError, Settings
from glpipes.navigator import Navigator, Startup


_log = logging.getLogger("glpipes")


def setup_logging(log_file: Optional[str]) -> None:
    """Send debug logs to a file; the TUI owns the terminal so nothing goes to stderr."""
    _log.setLevel(logging.DEBUG)
    _log.propagate = False
    for handler in list(_log.handlers):
        _log.removeHandler(handler)
        handler.close()
    if log_file:
        handler = logging.FileHandler(log_file)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        ))
        _log.addHandler(handler)
    else:
        _log.addHandler(logging.NullHandler())


def _echo_error(message: str) -> None:
    click.echo(message, err=True)


@click.command()
@click.version_option(version=__version__, prog_name="glpipes")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True),
    envvar=LOG_FILE_ENV,
    help="Write debug logs to this file.",
)
def cli(log_file: Optional[str]) -> None:
    """glpipes - browse GitLab pipelines from the terminal.

    Walk groups, projects, branches, pipelines and jobs; view a job's log
    or retry it.

    Environment:
        GITLAB_PERSONAL_TOKEN   Personal access token (required)
        GITLAB_URL              Instance URL (default https://gitlab.com)

    Keyboard shortcuts:
        Enter - Select
        Esc   - Cancel dialog
        ?     - Help
        q     - Quit
    """
    setup_logging(log_file)

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        click.echo(str(e), err=True)
        raise SystemExit(1)

    try:
        client = GitLabClient(settings.token, base_url=settings.api_url, timeout=settings.timeout)
    except GitLabError as e:
        click.echo(f"Error creating GitLab client: {e}", err=True)
        raise SystemExit(1)

    with client:
        _log.info("Connecting to instance %s", settings.url)
        navigator = Navigator(api=client, report=_echo_error)
        try:
            tree = navigator.dispatch(Startup())
        except GitLabError as e:
            click.echo(f"Error fetching groups: {e}", err=True)
            raise SystemExit(1)
        for node in tree.groups:
            _log.info("Group: %s (%d projects)", node.group.name, len(node.projects))

        from glpipes.tui import run_tui
        return_code = run_tui(navigator, url=settings.url)

    raise SystemExit(return_code or 0)


if __name__ == "__main__":
    cli()
