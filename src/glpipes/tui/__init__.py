"""Textual UI for glpipes."""

from .app import PipelinesApp, run_tui

__all__ = ["PipelinesApp", "run_tui"]
