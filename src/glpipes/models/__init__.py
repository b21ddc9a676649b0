"""Data models for glpipes."""

from .schemas import (
    Branch,
    Group,
    GroupRef,
    Job,
    NodeRef,
    Pipeline,
    Project,
    ProjectRef,
    parse_timestamp,
)

__all__ = [
    "Branch",
    "Group",
    "GroupRef",
    "Job",
    "NodeRef",
    "Pipeline",
    "Project",
    "ProjectRef",
    "parse_timestamp",
]
