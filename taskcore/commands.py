"""Reversible store mutations.

Each command is a plain record: intent fields fixed at construction, plus
the undo payload filled in while it is applied. The functions below do the
actual work against a store; CommandHistory picks the right pair by
matching on the command type.
"""
import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Union

from taskcore.models import READ_ONLY_FIELDS, Task
from taskcore.observers import TaskEvent

if TYPE_CHECKING:
    from taskcore.storage.task_store import TaskStore

PENDING = "pending"
APPLIED = "applied"
REVERTED = "reverted"


@dataclass(eq=False)
class CreateCommand:
    kind: str
    fields: Mapping[str, Any]
    state: str = PENDING
    task_id: Optional[int] = None
    # record taken out by the last revert, put back verbatim on redo
    removed: Optional[Task] = None

    def __post_init__(self):
        self.fields = MappingProxyType(copy.deepcopy(dict(self.fields)))


@dataclass(eq=False)
class UpdateCommand:
    task_id: int
    changes: Mapping[str, Any]
    state: str = PENDING
    previous: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.changes = MappingProxyType(copy.deepcopy(dict(self.changes)))


@dataclass(eq=False)
class DeleteCommand:
    task_id: int
    state: str = PENDING
    deleted: Optional[Task] = None


Command = Union[CreateCommand, UpdateCommand, DeleteCommand]


def apply_create(store: "TaskStore", command: CreateCommand) -> bool:
    if command.removed is not None:
        if not store.insert(copy.deepcopy(command.removed), TaskEvent.CREATED):
            return False
        command.removed = None
        return True
    task = store.create(command.kind, command.fields)
    command.task_id = task.id
    return True


def revert_create(store: "TaskStore", command: CreateCommand) -> bool:
    if command.task_id is None:
        return False
    task = store.get_task(command.task_id)
    if task is None:
        return False
    command.removed = copy.deepcopy(task)
    return store.delete(command.task_id)


def apply_update(store: "TaskStore", command: UpdateCommand) -> bool:
    task = store.get_task(command.task_id)
    if task is None:
        return False
    # old values are captured once; a redo re-applies the same new values
    if command.state == PENDING:
        command.previous = {
            key: copy.deepcopy(getattr(task, key))
            for key in command.changes
            if task.has_field(key) and key not in READ_ONLY_FIELDS
        }
    return store.update(command.task_id, command.changes)


def revert_update(store: "TaskStore", command: UpdateCommand) -> bool:
    if store.get_task(command.task_id) is None:
        return False
    return store.update(command.task_id, copy.deepcopy(command.previous), event=TaskEvent.REVERTED)


def apply_delete(store: "TaskStore", command: DeleteCommand) -> bool:
    task = store.get_task(command.task_id)
    if task is None:
        return False
    command.deleted = copy.deepcopy(task)
    return store.delete(command.task_id)


def revert_delete(store: "TaskStore", command: DeleteCommand) -> bool:
    if command.deleted is None:
        return False
    return store.insert(copy.deepcopy(command.deleted), TaskEvent.RESTORED)
