import copy
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from taskcore.errors import InvalidTaskError
from taskcore.utils.utils import get_date

PRIORITIES = ("low", "medium", "high")
KINDS = ("basic", "deadline", "recurring", "checklist")
INTERVALS = ("daily", "weekly", "monthly")

BASE_FIELDS = ("id", "title", "description", "priority", "completed", "created_at", "kind")

# Shape of each task kind: the keys a record of that kind carries
KIND_FIELDS: Dict[str, Tuple[str, ...]] = {
    "basic": BASE_FIELDS,
    "deadline": BASE_FIELDS + ("due_at",),
    "recurring": BASE_FIELDS + ("interval", "total_occurrences", "current_occurrence"),
    "checklist": BASE_FIELDS + ("subtasks",),
}

# Never changed after construction
READ_ONLY_FIELDS = frozenset({"id", "created_at", "kind"})

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass
class Subtask:
    """Checklist item owned by a checklist task"""
    id: int
    title: str
    description: str = ""
    completed: bool = False

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'completed': self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict):
        return cls(
            id=data['id'],
            title=data['title'],
            description=data.get('description', ""),
            completed=data.get('completed', False),
        )


@dataclass
class Task:
    """Task record tagged by kind.

    All kinds share one record shape; fields outside a kind's shape
    (see KIND_FIELDS) stay at their empty defaults and are left out of
    snapshots. Kind-specific behavior is looked up in tables keyed by kind.
    """
    id: int
    title: str
    kind: str = "basic"
    description: str = ""
    priority: str = "medium"
    completed: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    due_at: Optional[datetime] = None
    interval: Optional[str] = None
    total_occurrences: Optional[int] = None
    current_occurrence: Optional[int] = None
    subtasks: List[Subtask] = field(default_factory=list)

    @property
    def field_names(self) -> Tuple[str, ...]:
        """Keys that exist on a task of this kind"""
        return KIND_FIELDS[self.kind]

    def has_field(self, name: str) -> bool:
        return name in KIND_FIELDS[self.kind]

    def to_dict(self) -> dict:
        """Snapshot of the fields this kind carries"""
        data = {}
        for name in self.field_names:
            value = getattr(self, name)
            if isinstance(value, datetime):
                value = value.isoformat()
            elif name == 'subtasks':
                value = [s.to_dict() for s in value]
            data[name] = value
        return data

    def complete(self) -> bool:
        """Complete the task the way its kind does it"""
        return _COMPLETERS[self.kind](self)

    def summarize(self, now: datetime) -> dict:
        """Snapshot plus the computed fields of this kind"""
        info = self.to_dict()
        info.update(_SUMMARIZERS[self.kind](self, now))
        return info

    def is_overdue(self, now: datetime) -> bool:
        """Deadline passed and the task is still open"""
        if self.due_at is None:
            return False
        return now > self.due_at and not self.completed

    def remaining_days(self, now: datetime) -> Optional[int]:
        """Whole days until the deadline, rounded up (negative once overdue)"""
        if self.due_at is None:
            return None
        return math.ceil((self.due_at - now).total_seconds() / SECONDS_PER_DAY)

    def add_subtask(self, title: str, description: str = "") -> Subtask:
        """Append a checklist item with a fresh id"""
        if self.kind != "checklist":
            raise InvalidTaskError(f"{self.kind} tasks have no subtasks")
        next_id = max((s.id for s in self.subtasks), default=0) + 1
        subtask = Subtask(id=next_id, title=title, description=description)
        self.subtasks.append(subtask)
        return subtask

    def complete_subtask(self, subtask_id: int) -> bool:
        """Mark one checklist item done; the parent completes with the last one"""
        subtask = next((s for s in self.subtasks if s.id == subtask_id), None)
        if subtask is None:
            return False
        subtask.completed = True
        if all(s.completed for s in self.subtasks):
            self.completed = True
        return True


def _complete_once(task: Task) -> bool:
    task.completed = True
    return True


def _complete_occurrence(task: Task) -> bool:
    task.current_occurrence += 1
    if task.current_occurrence > task.total_occurrences:
        task.completed = True
    return task.current_occurrence <= task.total_occurrences


def _no_extra_info(task: Task, now: datetime) -> dict:
    return {}


def _deadline_info(task: Task, now: datetime) -> dict:
    return {
        'is_overdue': task.is_overdue(now),
        'remaining_days': task.remaining_days(now),
    }


def _recurring_info(task: Task, now: datetime) -> dict:
    return {'progress': f"{task.current_occurrence}/{task.total_occurrences}"}


def _checklist_info(task: Task, now: datetime) -> dict:
    done = sum(1 for s in task.subtasks if s.completed)
    return {'subtask_progress': f"{done}/{len(task.subtasks)}"}


_COMPLETERS: Dict[str, Callable[[Task], bool]] = {
    "basic": _complete_once,
    "deadline": _complete_once,
    "recurring": _complete_occurrence,
    "checklist": _complete_once,
}

_SUMMARIZERS: Dict[str, Callable[[Task, datetime], dict]] = {
    "basic": _no_extra_info,
    "deadline": _deadline_info,
    "recurring": _recurring_info,
    "checklist": _checklist_info,
}


def parse_due_at(raw) -> Optional[datetime]:
    """Accept a datetime, a date string, or None"""
    if raw is None:
        return None
    due_at = get_date(raw)
    if due_at is None:
        raise InvalidTaskError(f"Could not parse due date '{raw}'")
    return due_at


def _positive_int(name: str, value) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise InvalidTaskError(f"{name} must be a positive integer")
    return value


def _subtask(item) -> Subtask:
    if isinstance(item, Subtask):
        return copy.deepcopy(item)
    if isinstance(item, dict) and 'id' in item and 'title' in item:
        return Subtask.from_dict(item)
    raise InvalidTaskError(f"Not a subtask: {item!r}")


def normalize_changes(changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Check update values and return private copies a task can hold"""
    result = {}
    for key, value in changes.items():
        if key == 'title':
            if not isinstance(value, str) or not value.strip():
                raise InvalidTaskError("Task title cannot be empty")
        elif key == 'description':
            if not isinstance(value, str):
                raise InvalidTaskError("description must be text")
        elif key == 'priority':
            if value not in PRIORITIES:
                raise InvalidTaskError(f"Unknown priority '{value}'")
        elif key == 'completed':
            if not isinstance(value, bool):
                raise InvalidTaskError("completed must be True or False")
        elif key == 'interval':
            if value not in INTERVALS:
                raise InvalidTaskError(f"Unknown interval '{value}'")
        elif key == 'due_at':
            value = parse_due_at(value)
        elif key in ('total_occurrences', 'current_occurrence'):
            value = _positive_int(key, value)
        elif key == 'subtasks':
            if not isinstance(value, (list, tuple)):
                raise InvalidTaskError("subtasks must be a list")
            value = [_subtask(item) for item in value]
        result[key] = copy.deepcopy(value)
    return result
