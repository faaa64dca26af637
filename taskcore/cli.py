"""Command-line driver for taskcore."""

from datetime import timedelta
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from taskcore import __version__
from taskcore.config import TaskCoreConfig
from taskcore.filters import ByCompleted, ByPriority
from taskcore.logging_setup import setup_logging
from taskcore.models import KINDS
from taskcore.observers import ConsoleObserver, StatisticsObserver
from taskcore.storage.task_store import TaskStore, get_store

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="taskcore")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Path to a config.json (default: .taskcore/config.json)")
@click.pass_context
def cli(ctx, config_path):
    """taskcore - in-memory tasks with undo/redo"""
    ctx.ensure_object(dict)
    config = TaskCoreConfig.load(config_path)
    ctx.obj['config'] = config
    if ctx.obj.get('setup_logging'):
        setup_logging(config.log_level, config.log_file)
    ctx.obj['store'] = get_store(default_priority=config.default_priority)


@cli.command()
def kinds():
    """List the supported task kinds"""
    for kind in KINDS:
        console.print(f"• {kind}")


@cli.command()
@click.pass_context
def demo(ctx):
    """Walk through tasks, filters, observers and undo/redo"""
    config: TaskCoreConfig = ctx.obj['config']
    store: TaskStore = ctx.obj['store']

    stats_observer = StatisticsObserver(clock=store.clock)
    observers = [stats_observer]
    if config.console_observer:
        observers.append(ConsoleObserver(console, clock=store.clock, time_format=config.time_format))
    for observer in observers:
        store.subscribe(observer)

    try:
        _run_demo(store, stats_observer)
    finally:
        for observer in observers:
            store.unsubscribe(observer)


def _run_demo(store: TaskStore, stats_observer: StatisticsObserver):
    console.print("[bold]Creating tasks of each kind...[/bold]")
    learn = store.create("basic", {
        'title': "Learn Python",
        'description': "Finish the fundamentals course",
        'priority': "high",
    })
    store.create("deadline", {
        'title': "Ship project",
        'description': "Final project for the module",
        'priority': "high",
        'due_at': store.clock() + timedelta(days=7),
    })
    exercise = store.create("recurring", {
        'title': "Exercise",
        'description': "30 minutes a day",
        'priority': "medium",
        'interval': "daily",
        'total_occurrences': 7,
    })
    slides = store.create("checklist", {
        'title': "Prepare presentation",
        'description': "Client presentation",
        'priority': "high",
    })
    games = store.create("basic", {
        'title': "Play video games",
        'description': "Get further in the campaign",
        'priority': "low",
    })
    store.add_subtask(slides.id, "Research client", "Read up on the client")
    store.add_subtask(slides.id, "Build slides", "Design the deck")
    store.add_subtask(slides.id, "Rehearse", "Practice in front of the team")

    _print_statistics("Initial statistics", store.statistics())

    console.print("\n[bold]Completing tasks...[/bold]")
    store.update(learn.id, {'completed': True})
    for _ in range(3):
        store.complete_task(exercise.id)
    for subtask in slides.subtasks[:2]:
        store.complete_subtask(slides.id, subtask.id)
    store.complete_task(games.id)

    _print_statistics("Final statistics", store.statistics())
    _print_tasks("Pending tasks", store.list_tasks([ByCompleted(False)]))
    _print_tasks("Completed low-priority tasks", store.list_tasks([ByCompleted(True), ByPriority("low")]))

    events = stats_observer.statistics()
    console.print(f"\nEvents seen: {events['total_events']} {events['events_by_type']}")

    console.print("\n[bold]Undo/redo[/bold]")
    report = store.run_create("basic", {'title': "Monthly report", 'priority': "high"})
    store.run_update(games.id, {'completed': False})
    console.print(f"'{games.title}' after update: {_state(store, games.id)}")

    store.undo()
    console.print(f"'{games.title}' after undo: {_state(store, games.id)}")
    store.undo()
    console.print(f"Task {report.id} exists after undo: {store.get_task(report.id) is not None}")
    store.redo()
    console.print(f"Task {report.id} exists after redo: {store.get_task(report.id) is not None}")
    store.redo()
    console.print(f"'{games.title}' after redo: {_state(store, games.id)}")


def _state(store: TaskStore, task_id: int) -> str:
    task = store.get_task(task_id)
    if task is None:
        return "missing"
    return "done" if task.completed else "pending"


def _print_statistics(heading: str, stats: dict):
    table = Table(title=heading)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("total", str(stats['total']))
    table.add_row("completed", str(stats['completed']))
    table.add_row("pending", str(stats['pending']))
    for kind, count in stats['by_kind'].items():
        table.add_row(f"kind: {kind}", str(count))
    for priority, count in stats['by_priority'].items():
        table.add_row(f"priority: {priority}", str(count))
    console.print(table)


def _print_tasks(heading: str, tasks):
    console.print(f"\n[bold]{heading}:[/bold]")
    if not tasks:
        console.print("[dim]none[/dim]")
    for task in tasks:
        console.print(f"- {task.title} ({task.kind}, {task.priority})")


def main():
    """Console entry point; logging is configured once the config is known"""
    cli(obj={'setup_logging': True})


if __name__ == '__main__':
    main()
