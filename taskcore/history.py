import logging
from typing import TYPE_CHECKING, List, Tuple

from taskcore import commands
from taskcore.commands import APPLIED, REVERTED, Command, CreateCommand, DeleteCommand, UpdateCommand

if TYPE_CHECKING:
    from taskcore.storage.task_store import TaskStore

logger = logging.getLogger(__name__)


class CommandHistory:
    """Linear undo/redo over store commands.

    Two LIFO stacks: commands that are applied and commands that were
    undone. A command is on at most one stack at a time, and executing a
    new command drops everything on the redo stack.
    """

    def __init__(self, store: "TaskStore"):
        self.store = store
        self._applied: List[Command] = []
        self._reverted: List[Command] = []

    @property
    def applied(self) -> Tuple[Command, ...]:
        return tuple(self._applied)

    @property
    def reverted(self) -> Tuple[Command, ...]:
        return tuple(self._reverted)

    def can_undo(self) -> bool:
        return bool(self._applied)

    def can_redo(self) -> bool:
        return bool(self._reverted)

    def execute(self, command: Command) -> bool:
        """Apply a new command and start a fresh timeline from it"""
        try:
            ok = self._apply(command)
        except Exception:
            logger.exception("Command %s failed", type(command).__name__)
            return False
        if not ok:
            logger.info("Command %s was not applied", type(command).__name__)
            return False
        self._applied.append(command)
        self._reverted.clear()
        logger.info("Command executed, added to undo history. Total: %d", len(self._applied))
        return True

    def undo(self) -> bool:
        """Revert the most recent applied command"""
        if not self._applied:
            logger.info("Nothing to undo.")
            return False
        command = self._applied.pop()
        if not self._revert(command):
            self._applied.append(command)
            logger.info("Undo of %s failed; command kept", type(command).__name__)
            return False
        self._reverted.append(command)
        logger.info("Command undone. Undo: %d, Redo: %d", len(self._applied), len(self._reverted))
        return True

    def redo(self) -> bool:
        """Re-apply the most recently undone command"""
        if not self._reverted:
            logger.info("Nothing to redo.")
            return False
        command = self._reverted.pop()
        if not self._apply(command):
            self._reverted.append(command)
            logger.info("Redo of %s failed; command kept", type(command).__name__)
            return False
        self._applied.append(command)
        logger.info("Command redone. Undo: %d, Redo: %d", len(self._applied), len(self._reverted))
        return True

    def clear(self):
        self._applied.clear()
        self._reverted.clear()

    def _apply(self, command: Command) -> bool:
        match command:
            case CreateCommand():
                ok = commands.apply_create(self.store, command)
            case UpdateCommand():
                ok = commands.apply_update(self.store, command)
            case DeleteCommand():
                ok = commands.apply_delete(self.store, command)
            case _:
                raise TypeError(f"Not a command: {command!r}")
        if ok:
            command.state = APPLIED
        return ok

    def _revert(self, command: Command) -> bool:
        match command:
            case CreateCommand():
                ok = commands.revert_create(self.store, command)
            case UpdateCommand():
                ok = commands.revert_update(self.store, command)
            case DeleteCommand():
                ok = commands.revert_delete(self.store, command)
            case _:
                raise TypeError(f"Not a command: {command!r}")
        if ok:
            command.state = REVERTED
        return ok
