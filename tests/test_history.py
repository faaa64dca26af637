import copy

import pytest

from taskcore.commands import APPLIED, PENDING, REVERTED, CreateCommand, DeleteCommand, UpdateCommand
from taskcore.models import Subtask
from taskcore.errors import InvalidTaskError, UnsupportedKindError


def test_create_undo_redo(store):
    """Undo removes a created task; redo brings back the same record"""
    task = store.run_create("basic", {'title': "Round trip", 'priority': "high"})
    before = copy.deepcopy(task)

    assert store.undo() is True
    assert store.get_task(task.id) is None

    assert store.redo() is True
    restored = store.get_task(task.id)
    assert restored == before
    assert restored.created_at == before.created_at


def test_redo_create_does_not_advance_ids(store):
    """Undo/redo of a create leaves the id counter alone"""
    first = store.run_create("basic", {'title': "One"})
    store.undo()
    store.redo()
    second = store.run_create("basic", {'title': "Two"})
    assert second.id == first.id + 1


def test_update_undo_redo(store):
    task = store.run_create("basic", {'title': "Prioritize"})
    assert store.run_update(task.id, {'priority': "high"}) is True
    assert store.get_task(task.id).priority == "high"

    assert store.undo() is True
    assert store.get_task(task.id).priority == "medium"

    assert store.redo() is True
    assert store.get_task(task.id).priority == "high"


def test_update_snapshot_taken_once(store):
    """Redo re-applies new values without re-capturing the old ones"""
    task = store.run_create("basic", {'title': "Snap"})
    store.run_update(task.id, {'title': "Snapped"})
    command = store.history.applied[-1]
    assert command.previous == {'title': "Snap"}

    store.undo()
    store.redo()
    assert command.previous == {'title': "Snap"}
    store.undo()
    assert store.get_task(task.id).title == "Snap"


def test_update_only_snapshots_existing_fields(store):
    """Keys a kind doesn't carry are neither captured nor written"""
    task = store.run_create("basic", {'title': "Plain"})
    store.run_update(task.id, {'due_at': None, 'description': "now described", 'id': 99})
    command = store.history.applied[-1]

    assert command.previous == {'description': ""}
    assert store.get_task(task.id).description == "now described"
    assert store.get_task(99) is None


def test_delete_undo_restores_exact_record(store):
    task = store.run_create("checklist", {'title': "Keep me", 'subtasks': ["one", "two"]})
    store.complete_subtask(task.id, 1)
    snapshot = copy.deepcopy(store.get_task(task.id))

    assert store.run_delete(task.id) is True
    assert store.get_task(task.id) is None

    assert store.undo() is True
    restored = store.get_task(task.id)
    assert restored == snapshot
    assert restored.id == snapshot.id
    assert restored.created_at == snapshot.created_at


def test_delete_redo(store):
    task = store.run_create("basic", {'title': "Gone twice"})
    store.run_delete(task.id)
    store.undo()
    assert store.redo() is True
    assert store.get_task(task.id) is None


def test_execute_clears_redo(store):
    """A new command drops the undone branch"""
    store.run_create("basic", {'title': "A"})
    assert store.undo() is True
    assert store.history.can_redo()

    store.run_create("basic", {'title': "B"})
    assert not store.history.can_redo()
    assert store.redo() is False
    assert [t.title for t in store.list_tasks()] == ["B"]


def test_empty_stacks(store):
    assert store.undo() is False
    assert store.redo() is False


def test_failed_command_not_recorded(store):
    """Commands against missing ids report False and leave history alone"""
    assert store.run_update(42, {'title': "ghost"}) is False
    assert store.run_delete(42) is False
    assert store.history.applied == ()
    assert store.history.reverted == ()


def test_failed_undo_keeps_command(store):
    """If the target vanished, undo fails and the command stays put"""
    task = store.run_create("basic", {'title': "Target"})
    store.run_update(task.id, {'priority': "low"})
    store.delete(task.id)

    update = store.history.applied[-1]
    assert store.undo() is False
    assert store.history.applied[-1] is update
    assert store.history.reverted == ()


def test_failed_redo_keeps_command(store):
    task = store.run_create("basic", {'title': "Target"})
    store.run_update(task.id, {'priority': "low"})
    store.undo()
    store.delete(task.id)

    update = store.history.reverted[-1]
    assert store.redo() is False
    assert store.history.reverted[-1] is update
    assert len(store.history.applied) == 1


def test_command_in_one_stack_at_a_time(store):
    task = store.run_create("basic", {'title': "Solo"})
    store.run_update(task.id, {'completed': True})
    store.undo()

    applied = set(map(id, store.history.applied))
    reverted = set(map(id, store.history.reverted))
    assert applied.isdisjoint(reverted)
    assert len(applied) + len(reverted) == 2


def test_command_states(store):
    command = UpdateCommand(1, {'title': "x"})
    assert command.state == PENDING

    store.create("basic", {'title': "State"})
    assert store.history.execute(command)
    assert command.state == APPLIED
    store.undo()
    assert command.state == REVERTED
    store.redo()
    assert command.state == APPLIED


def test_command_intent_is_read_only():
    changes = {'title': "x"}
    command = UpdateCommand(1, changes)
    changes['title'] = "y"
    assert command.changes['title'] == "x"
    with pytest.raises(TypeError):
        command.changes['title'] = "z"


def test_revert_create_when_already_deleted(store):
    """Undoing a create whose task was removed elsewhere is a no-op"""
    task = store.run_create("basic", {'title': "Elsewhere"})
    store.delete(task.id)
    assert store.undo() is False
    assert len(store.history.applied) == 1


def test_run_create_unknown_kind(store):
    """Unknown kinds surface to the caller and touch nothing"""
    with pytest.raises(UnsupportedKindError):
        store.run_create("bogus", {'title': "x"})
    assert len(store) == 0
    assert store.history.applied == ()
    assert store.create("basic", {'title': "first"}).id == 1


def test_run_update_invalid_value(store):
    task = store.run_create("basic", {'title': "Valid"})
    with pytest.raises(InvalidTaskError):
        store.run_update(task.id, {'priority': "urgent"})
    assert store.get_task(task.id).priority == "medium"
    assert len(store.history.applied) == 1


def test_execute_swallows_unexpected_errors(store, caplog):
    """A command blowing up during execute is logged and reported as False"""
    command = CreateCommand("bogus", {'title': "x"})
    assert store.history.execute(command) is False
    assert store.history.applied == ()
    assert "failed" in caplog.text


def test_direct_delete_command(store):
    task = store.create("basic", {'title': "Direct"})
    command = DeleteCommand(task.id)
    assert store.history.execute(command)
    assert command.deleted.title == "Direct"


@pytest.mark.parametrize("changes", [
    {'total_occurrences': "3"},
    {'current_occurrence': 0},
    {'completed': "no"},
])
def test_run_update_rejects_wrong_types(store, changes):
    """Wrong-typed values never reach the stored record"""
    task = store.run_create("recurring", {'title': "Swim", 'total_occurrences': 3})
    with pytest.raises(InvalidTaskError):
        store.run_update(task.id, changes)
    assert store.complete_task(task.id) is True
    assert task.current_occurrence == 2
    assert len(store.history.applied) == 1


def test_run_update_subtask_dicts(store, recorder):
    """Subtask dicts are stored as Subtask records and observers still hear about it"""
    task = store.run_create("checklist", {'title': "Pack"})
    assert store.run_update(task.id, {'subtasks': [{'id': 1, 'title': "Shoes"}]}) is True

    assert store.get_task(task.id).subtasks == [Subtask(id=1, title="Shoes")]
    assert recorder.last_event() == "updated"
    assert recorder.events[-1]['snapshot']['subtasks'][0]['title'] == "Shoes"


def test_run_update_rejects_bad_subtasks(store):
    task = store.run_create("checklist", {'title': "Pack"})
    with pytest.raises(InvalidTaskError):
        store.run_update(task.id, {'subtasks': [{'title': "no id"}]})
    assert store.get_task(task.id).subtasks == []


def test_run_update_due_date_string(store):
    """Due dates in updates parse like they do at creation"""
    task = store.run_create("deadline", {'title': "File taxes"})
    assert store.run_update(task.id, {'due_at': "2026-04-15"}) is True
    assert store.get_task(task.id).due_at.year == 2026
    with pytest.raises(InvalidTaskError):
        store.run_update(task.id, {'due_at': "whenever"})


def test_redo_reapplies_original_values(store):
    """Changes made to the task after an update don't leak into its redo"""
    task = store.run_create("checklist", {'title': "Trip"})
    subtasks = [Subtask(1, "Book flights")]
    store.run_update(task.id, {'subtasks': subtasks})

    store.complete_subtask(task.id, 1)
    subtasks[0].title = "Changed by caller"
    store.undo()
    store.redo()

    redone = store.get_task(task.id).subtasks
    assert redone == [Subtask(1, "Book flights")]
    assert redone[0].completed is False


def test_update_command_keeps_its_own_copy():
    subtasks = [Subtask(1, "Mine")]
    command = UpdateCommand(1, {'subtasks': subtasks})
    subtasks.append(Subtask(2, "Extra"))
    assert len(command.changes['subtasks']) == 1
