from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence

from taskcore.models import Task


class FilterStrategy(ABC):
    """Order-preserving filter over a task sequence.

    Subclasses must implement apply(); one that does not cannot be
    instantiated.
    """

    @abstractmethod
    def apply(self, tasks: Sequence[Task]) -> List[Task]:
        """Return the matching tasks, leaving the input untouched"""


class ByCompleted(FilterStrategy):
    """Keep tasks whose completed flag equals the given value"""

    def __init__(self, completed: bool):
        self.completed = completed

    def apply(self, tasks: Sequence[Task]) -> List[Task]:
        return [t for t in tasks if t.completed == self.completed]

    def __repr__(self):
        return f"<ByCompleted {self.completed}>"


class ByPriority(FilterStrategy):
    """Keep tasks with the given priority"""

    def __init__(self, priority: str):
        self.priority = priority

    def apply(self, tasks: Sequence[Task]) -> List[Task]:
        return [t for t in tasks if t.priority == self.priority]

    def __repr__(self):
        return f"<ByPriority {self.priority}>"


class ByKind(FilterStrategy):
    """Keep tasks of the given kind (case-insensitive)"""

    def __init__(self, kind: str):
        self.kind = kind.lower()

    def apply(self, tasks: Sequence[Task]) -> List[Task]:
        return [t for t in tasks if t.kind == self.kind]

    def __repr__(self):
        return f"<ByKind {self.kind}>"


def apply_all(tasks: Iterable[Task], strategies: Optional[Sequence[FilterStrategy]] = None) -> List[Task]:
    """Fold strategies left to right over the tasks"""
    result = list(tasks)
    if strategies is None:
        return result
    if isinstance(strategies, (dict, FilterStrategy)):
        raise TypeError("strategies must be a sequence of FilterStrategy objects")
    for strategy in strategies:
        if not isinstance(strategy, FilterStrategy):
            raise TypeError(f"{strategy!r} is not a FilterStrategy")
        result = strategy.apply(result)
    return result
