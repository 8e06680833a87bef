"""Task lifecycle use cases: status change, veto, audit trail."""

from labelflow.application.use_cases.tasks.task_lifecycle import TaskLifecycleService

__all__ = ["TaskLifecycleService"]
