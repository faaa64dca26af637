import logging
from typing import Any, Mapping

from taskcore.errors import InvalidTaskError, UnsupportedKindError
from taskcore.models import INTERVALS, KINDS, PRIORITIES, Subtask, Task, parse_due_at
from taskcore.utils.utils import Clock, system_clock

logger = logging.getLogger(__name__)


class TaskFactory:
    """Builds task records of each kind from a field bag.

    The factory never allocates ids; the store passes one in. created_at is
    stamped from the injected clock.
    """

    def __init__(self, clock: Clock = system_clock, default_priority: str = 'medium'):
        if default_priority not in PRIORITIES:
            raise InvalidTaskError(f"Unknown priority '{default_priority}'")
        self.clock = clock
        self.default_priority = default_priority

    @staticmethod
    def resolve_kind(kind: str) -> str:
        """Normalize a kind tag, raising UnsupportedKindError for unknown ones"""
        normalized = kind.lower() if isinstance(kind, str) else kind
        if normalized not in KINDS:
            raise UnsupportedKindError(kind)
        return normalized

    def validate(self, kind: str, base_fields: Mapping[str, Any]) -> str:
        """Check kind and fields without building anything; returns the kind"""
        self.create(kind, base_fields)
        return self.resolve_kind(kind)

    def create(self, kind: str, base_fields: Mapping[str, Any], task_id: int = 0) -> Task:
        """Build a new task of the given kind"""
        kind = self.resolve_kind(kind)

        title = base_fields.get('title')
        if not isinstance(title, str) or not title.strip():
            raise InvalidTaskError("Task title is required")

        priority = base_fields.get('priority') or self.default_priority
        if priority not in PRIORITIES:
            raise InvalidTaskError(f"Unknown priority '{priority}'")

        task = Task(
            id=task_id,
            title=title,
            kind=kind,
            description=base_fields.get('description') or "",
            priority=priority,
            completed=bool(base_fields.get('completed', False)),
            created_at=self.clock(),
        )
        _VARIANT_BUILDERS[kind](task, base_fields)
        logger.debug("Built %s task '%s'", kind, title)
        return task


def _build_basic(task: Task, fields: Mapping[str, Any]):
    pass


def _build_deadline(task: Task, fields: Mapping[str, Any]):
    task.due_at = parse_due_at(fields.get('due_at'))


def _build_recurring(task: Task, fields: Mapping[str, Any]):
    interval = fields.get('interval') or 'daily'
    if interval not in INTERVALS:
        raise InvalidTaskError(f"Unknown interval '{interval}'")
    total = fields.get('total_occurrences')
    if total is None:
        total = 1
    if not isinstance(total, int) or isinstance(total, bool) or total < 1:
        raise InvalidTaskError("total_occurrences must be a positive integer")
    task.interval = interval
    task.total_occurrences = total
    task.current_occurrence = 1


def _build_checklist(task: Task, fields: Mapping[str, Any]):
    for item in fields.get('subtasks') or []:
        if isinstance(item, str):
            task.add_subtask(item)
        elif isinstance(item, Subtask):
            task.add_subtask(item.title, item.description)
        else:
            task.add_subtask(item['title'], item.get('description', ""))


_VARIANT_BUILDERS = {
    "basic": _build_basic,
    "deadline": _build_deadline,
    "recurring": _build_recurring,
    "checklist": _build_checklist,
}
