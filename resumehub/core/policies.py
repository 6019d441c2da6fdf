"""
Resume Access Policy

Ownership is the only authorization rule for resumes: a user may list and
create their own resumes, and may view, update, delete, restore or
permanently delete a resume only if they own it. There are no roles,
sharing or delegation.

Decisions are pure functions of the actor id and Resume.user_id. Ids are
compared with ==, without coercion, so "5" never matches 5.
"""
import enum
from typing import Optional, Protocol

from fastapi import HTTPException, status

from resumehub.core.exceptions import PreconditionError


class PermissionDenied(HTTPException):
    """Raised when a policy decision is negative."""

    def __init__(self, detail: str = "Permission denied"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


class Action(str, enum.Enum):
    VIEW_ANY = "view_any"
    CREATE = "create"
    VIEW = "view"
    UPDATE = "update"
    DELETE = "delete"
    RESTORE = "restore"
    FORCE_DELETE = "force_delete"


# Actions that are decided without a resource
COLLECTION_ACTIONS = frozenset({Action.VIEW_ANY, Action.CREATE})


class AccessGuard(Protocol):
    """One decision method per action."""

    def view_any(self, actor) -> bool:
        ...

    def create(self, actor) -> bool:
        ...

    def view(self, actor, resource) -> bool:
        ...

    def update(self, actor, resource) -> bool:
        ...

    def delete(self, actor, resource) -> bool:
        ...

    def restore(self, actor, resource) -> bool:
        ...

    def force_delete(self, actor, resource) -> bool:
        ...


class ResumePolicy:
    """AccessGuard for resumes."""

    def view_any(self, actor) -> bool:
        return True

    def create(self, actor) -> bool:
        return True

    def view(self, actor, resume) -> bool:
        return self._owns(actor, resume, Action.VIEW)

    def update(self, actor, resume) -> bool:
        return self._owns(actor, resume, Action.UPDATE)

    def delete(self, actor, resume) -> bool:
        return self._owns(actor, resume, Action.DELETE)

    def restore(self, actor, resume) -> bool:
        return self._owns(actor, resume, Action.RESTORE)

    def force_delete(self, actor, resume) -> bool:
        return self._owns(actor, resume, Action.FORCE_DELETE)

    @staticmethod
    def _owns(actor, resume, action: Action) -> bool:
        if resume is None:
            raise PreconditionError(f"'{action.value}' requires a resume")
        if actor.id is None:
            return False
        return actor.id == resume.user_id


def decide(guard: AccessGuard, action: Action, actor, resource=None) -> bool:
    """Table-driven entry point: dispatch to the guard method named by action."""
    action = Action(action)
    method = getattr(guard, action.value)
    if action in COLLECTION_ACTIONS:
        return method(actor)
    return method(actor, resource)


def authorize(
    guard: AccessGuard,
    action: Action,
    actor,
    resource=None,
    detail: Optional[str] = None
) -> None:
    """Raise PermissionDenied unless guard allows action."""
    if not decide(guard, action, actor, resource):
        raise PermissionDenied(detail or f"Not authorized to {Action(action).value.replace('_', ' ')} this resume")
