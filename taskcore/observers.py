from collections import Counter
from typing import List, Optional, Protocol, runtime_checkable

from rich.console import Console
from rich.markup import escape

from taskcore.utils.utils import Clock, system_clock


class TaskEvent:
    """Event names a store emits"""
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    REVERTED = "reverted"
    RESTORED = "restored"


@runtime_checkable
class Observer(Protocol):
    """Anything with notify(event, snapshot) can subscribe to a store"""

    def notify(self, event: str, snapshot: dict) -> None:
        ...


class ConsoleObserver:
    """Prints one line per store event"""

    def __init__(self, console: Optional[Console] = None, clock: Clock = system_clock,
                 time_format: str = "%H:%M:%S"):
        self.console = console or Console()
        self.clock = clock
        self.time_format = time_format

    def notify(self, event: str, snapshot: dict) -> None:
        timestamp = self.clock().strftime(self.time_format)
        label = escape(str(snapshot.get('title') or snapshot.get('id')))
        self.console.print(f"[dim]\\[{timestamp}][/dim] [cyan]{event}[/cyan]: {label}", highlight=False)


class StatisticsObserver:
    """Records every event it sees and reports counts per event type"""

    def __init__(self, clock: Clock = system_clock):
        self.clock = clock
        self.events: List[dict] = []

    def notify(self, event: str, snapshot: dict) -> None:
        self.events.append({'event': event, 'snapshot': snapshot, 'timestamp': self.clock()})

    def statistics(self) -> dict:
        return {
            'total_events': len(self.events),
            'events_by_type': dict(Counter(e['event'] for e in self.events)),
        }

    def last_event(self) -> Optional[str]:
        return self.events[-1]['event'] if self.events else None
