class TimerEngineError(Exception):
    """Base exception for rejected task timer commands."""


class TaskNotFoundError(TimerEngineError):
    """Raised when a command references a task id that does not exist."""

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class InvalidTaskNameError(TimerEngineError):
    """Raised when a task name is empty or whitespace only."""
