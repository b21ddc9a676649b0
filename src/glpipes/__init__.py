"""glpipes - browse GitLab pipelines and jobs from the terminal."""

__version__ = "0.1.0"
