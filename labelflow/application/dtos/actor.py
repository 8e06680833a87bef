"""DTO for the user performing a lifecycle operation."""

from __future__ import annotations

from dataclasses import dataclass

from labelflow.domain.enums import ProjectRole


@dataclass(frozen=True)
class ActorContext:
    """Acting user and, when known, their role in the task's project.

    Authentication happens upstream; a missing role means role-gated checks
    are left to the caller.
    """

    user_id: str | None
    role: ProjectRole | None = None

    def has_role(self, *roles: ProjectRole) -> bool:
        return self.role is not None and self.role in roles
