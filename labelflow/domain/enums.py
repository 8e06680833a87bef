"""Domain enumerations for the Labelflow task lifecycle.

Enums represent fixed sets of domain values (task status, stage type,
audit event category, project role). String-valued so they serialize
directly to the database and API.
"""

from enum import Enum


class TaskStatus(str, Enum):
    """Lifecycle status of an annotation task.

    READY_FOR_* and NOT_STARTED are assigned by the system during stage
    handoff; they are never valid manual targets.
    """

    NOT_STARTED = "not_started"
    READY_FOR_ANNOTATION = "ready_for_annotation"
    READY_FOR_REVIEW = "ready_for_review"
    READY_FOR_COMPLETION = "ready_for_completion"
    IN_PROGRESS = "in_progress"
    SUSPENDED = "suspended"
    DEFERRED = "deferred"
    COMPLETED = "completed"
    ARCHIVED = "archived"
    CHANGES_REQUIRED = "changes_required"
    VETOED = "vetoed"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid status values as strings.

        Returns:
            List of enum value strings (e.g. for validation or serialization).
        """
        return [status.value for status in cls]

    @classmethod
    def parse(cls, value: "str | TaskStatus") -> "TaskStatus | None":
        """Map an external status string to a TaskStatus.

        Accepts the enum value ("in_progress") or name ("IN_PROGRESS").
        Returns None for anything unrecognized; callers decide how to reject it.
        """
        if isinstance(value, TaskStatus):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip()
        try:
            return cls(normalized.lower())
        except ValueError:
            return cls.__members__.get(normalized.upper())


class WorkflowStageType(str, Enum):
    """Kind of work done in a workflow stage. Stages are linear in this order."""

    ANNOTATION = "annotation"
    REVISION = "revision"
    COMPLETION = "completion"


class TaskEventType(str, Enum):
    """Coarse category stored on audit events."""

    TASK_CREATED = "task_created"
    STATUS_CHANGED = "status_changed"


class ProjectRole(str, Enum):
    """Role of the acting user within the task's project."""

    MANAGER = "manager"
    REVIEWER = "reviewer"
    ANNOTATOR = "annotator"
    VIEWER = "viewer"

    @classmethod
    def parse(cls, value: str | None) -> "ProjectRole | None":
        """Return the role for a header value, or None when absent or unknown."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None
