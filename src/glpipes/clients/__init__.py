"""Remote API clients for glpipes."""

from .gitlab import GitLabClient, GitLabError

__all__ = [
    "GitLabClient",
    "GitLabError",
]
