class TaskCoreError(Exception):
    """Base class for task kernel errors"""


class UnsupportedKindError(TaskCoreError):
    """Raised when a task kind is not one the factory knows how to build"""

    def __init__(self, kind):
        self.kind = kind
        super().__init__(f"Task kind '{kind}' is not supported")


class InvalidTaskError(TaskCoreError, ValueError):
    """Raised when task fields are missing or out of range"""
