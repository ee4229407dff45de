"""Reports that background tasks send back about their outcome and progress."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TaskReport:
    """Outcome or progress of a background task.

    ``result`` holds the success message, or the error message when
    ``is_error`` is set. ``progress`` is a fraction in ``[0, 1]`` or None
    when it cannot be known.
    """

    task_id: int
    result: str
    is_error: bool = False
    progress: Optional[float] = None
    current_item: Optional[str] = None
    completed: Optional[int] = None
    total: Optional[int] = None
    message: Optional[str] = None
    execution_time: Optional[float] = None
    memory_usage: Optional[int] = None

    @classmethod
    def ok(cls, task_id: int, message: str) -> TaskReport:
        """A finished task that succeeded."""
        return cls(task_id=task_id, result=message, is_error=False, progress=1.0)

    @classmethod
    def error(cls, task_id: int, message: str) -> TaskReport:
        """A finished task that failed."""
        return cls(task_id=task_id, result=message, is_error=True, progress=1.0)

    @property
    def succeeded(self) -> bool:
        return not self.is_error

    @property
    def is_final(self) -> bool:
        """True once the task has reached full progress."""
        return self.progress is not None and self.progress >= 1.0