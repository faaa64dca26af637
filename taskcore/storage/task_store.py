import logging
from collections import Counter
from typing import Any, List, Mapping, Optional, Sequence

from taskcore.commands import CreateCommand, DeleteCommand, UpdateCommand
from taskcore.factory import TaskFactory
from taskcore.filters import FilterStrategy, apply_all
from taskcore.history import CommandHistory
from taskcore.models import READ_ONLY_FIELDS, Subtask, Task, normalize_changes
from taskcore.observers import Observer, TaskEvent
from taskcore.utils.utils import Clock, system_clock

logger = logging.getLogger(__name__)


class TaskStore:
    """In-memory task collection with observers and undo/redo.

    create/update/delete change the collection directly and notify
    observers; run_create/run_update/run_delete wrap the same changes in
    commands so they can be undone.
    """

    def __init__(self, clock: Clock = system_clock, default_priority: str = 'medium'):
        self.clock = clock
        self.factory = TaskFactory(clock, default_priority)
        self._index: dict[int, Task] = {}
        self._next_id: int = 1
        self._observers: List[Observer] = []
        self.history = CommandHistory(self)

    # --- observers ---

    def subscribe(self, observer: Observer):
        """Add an observer; subscribing the same object twice is a no-op"""
        if not any(o is observer for o in self._observers):
            self._observers.append(observer)

    def unsubscribe(self, observer: Observer):
        self._observers = [o for o in self._observers if o is not observer]

    @property
    def observers(self) -> List[Observer]:
        return list(self._observers)

    def notify(self, event: str, task: Task):
        """Send a snapshot of the task to every observer, isolating failures"""
        for observer in list(self._observers):
            try:
                observer.notify(event, task.to_dict())
            except Exception:
                logger.exception("Observer %r failed on '%s' for task %s", observer, event, task.id)

    # --- direct mutations ---

    def create(self, kind: str, fields: Mapping[str, Any]) -> Task:
        """Build a task under the next id and add it"""
        task = self.factory.create(kind, fields, task_id=self._next_id)
        self._next_id += 1
        self._index[task.id] = task
        self.notify(TaskEvent.CREATED, task)
        return task

    def update(self, task_id: int, changes: Mapping[str, Any], event: str = TaskEvent.UPDATED) -> bool:
        """Overwrite the given fields in place, return False if the task is gone"""
        task = self._index.get(task_id)
        if task is None:
            return False
        for key, value in normalize_changes(changes).items():
            if key in READ_ONLY_FIELDS or not task.has_field(key):
                logger.debug("Ignoring change to '%s' on %s task %s", key, task.kind, task_id)
                continue
            setattr(task, key, value)
        self.notify(event, task)
        return True

    def delete(self, task_id: int) -> bool:
        """Delete a task by ID, return True if deleted"""
        task = self._index.pop(task_id, None)
        if task is None:
            return False
        self.notify(TaskEvent.DELETED, task)
        return True

    def insert(self, task: Task, event: str = TaskEvent.RESTORED) -> bool:
        """Put a previously removed record back under its own id"""
        if task.id in self._index:
            return False
        self._index[task.id] = task
        self.notify(event, task)
        return True

    def complete_task(self, task_id: int) -> bool:
        task = self._index.get(task_id)
        if task is None:
            return False
        task.complete()
        self.notify(TaskEvent.UPDATED, task)
        return True

    def add_subtask(self, task_id: int, title: str, description: str = "") -> Optional[Subtask]:
        task = self._index.get(task_id)
        if task is None or task.kind != "checklist":
            return None
        subtask = task.add_subtask(title, description)
        self.notify(TaskEvent.UPDATED, task)
        return subtask

    def complete_subtask(self, task_id: int, subtask_id: int) -> bool:
        task = self._index.get(task_id)
        if task is None or not task.complete_subtask(subtask_id):
            return False
        self.notify(TaskEvent.UPDATED, task)
        return True

    # --- undoable mutations ---

    def run_create(self, kind: str, fields: Mapping[str, Any]) -> Optional[Task]:
        """Create through the history; returns the new task or None"""
        self.factory.validate(kind, fields)
        command = CreateCommand(kind, fields)
        if not self.history.execute(command):
            return None
        return self.get_task(command.task_id)

    def run_update(self, task_id: int, changes: Mapping[str, Any]) -> bool:
        return self.history.execute(UpdateCommand(task_id, normalize_changes(changes)))

    def run_delete(self, task_id: int) -> bool:
        return self.history.execute(DeleteCommand(task_id))

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    # --- queries ---

    def get_task(self, task_id: int) -> Optional[Task]:
        """Get a specific task by ID"""
        return self._index.get(task_id)

    def list_tasks(self, strategies: Optional[Sequence[FilterStrategy]] = None) -> List[Task]:
        """All tasks in insertion order, narrowed by each strategy in turn"""
        return apply_all(self._index.values(), strategies)

    def summarize(self, task_id: int) -> Optional[dict]:
        """Snapshot of a task with its computed fields as of now"""
        task = self._index.get(task_id)
        return task.summarize(self.clock()) if task else None

    def statistics(self) -> dict:
        tasks = list(self._index.values())
        completed = sum(1 for t in tasks if t.completed)
        return {
            'total': len(tasks),
            'completed': completed,
            'pending': len(tasks) - completed,
            'by_kind': dict(Counter(t.kind for t in tasks)),
            'by_priority': dict(Counter(t.priority for t in tasks)),
        }

    def __len__(self):
        return len(self._index)

    def __contains__(self, task_id):
        return task_id in self._index


_store: Optional[TaskStore] = None


def get_store(clock: Clock = system_clock, default_priority: str = 'medium') -> TaskStore:
    """Process-wide store, created on first use.

    Later calls return the same instance and ignore their arguments.
    """
    global _store
    if _store is None:
        _store = TaskStore(clock, default_priority)
    return _store


def reset_store():
    """Drop the process-wide store so the next get_store() builds a new one"""
    global _store
    _store = None
