"""Read-only projections of GitLab API responses."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a GitLab ISO timestamp, returning None when it can't be read."""
    if not value:
        return None
    try:
        # GitLab returns e.g. 2024-01-15T10:30:00.000Z
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None


@dataclass(frozen=True)
class Group:
    """A GitLab group."""

    id: int
    name: str
    full_path: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "Group":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            full_path=data.get("full_path"),
        )


@dataclass(frozen=True)
class Project:
    """A project inside a group."""

    id: int
    name: str
    group_id: Optional[int] = None
    path_with_namespace: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "Project":
        namespace = data.get("namespace") or {}
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            group_id=namespace.get("id"),
            path_with_namespace=data.get("path_with_namespace"),
        )


@dataclass(frozen=True)
class Branch:
    """A repository branch; only the name is used."""

    name: str

    @classmethod
    def from_api(cls, data: dict) -> "Branch":
        return cls(name=data["name"])


@dataclass(frozen=True)
class Pipeline:
    """One pipeline run for a ref."""

    id: int
    status: str
    ref: str
    source: str = ""
    updated_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: dict) -> "Pipeline":
        return cls(
            id=data["id"],
            status=data.get("status", ""),
            ref=data.get("ref", ""),
            source=data.get("source") or "",
            updated_at=parse_timestamp(data.get("updated_at")),
        )


@dataclass(frozen=True)
class Job:
    """A single job within a pipeline."""

    id: int
    name: str
    status: str
    pipeline_id: Optional[int] = None
    stage: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "Job":
        pipeline = data.get("pipeline") or {}
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            status=data.get("status", ""),
            pipeline_id=pipeline.get("id"),
            stage=data.get("stage"),
        )


@dataclass(frozen=True)
class GroupRef:
    """Tree node reference for a group header."""

    group_id: int


@dataclass(frozen=True)
class ProjectRef:
    """Tree node reference for a selectable project."""

    project_id: int


NodeRef = Union[GroupRef, ProjectRef]
