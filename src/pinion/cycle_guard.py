"""Detection of types requested again while they are still being constructed."""

import threading
from contextlib import contextmanager
from typing import Any, Iterator

from pinion.errors import CircularDependencyError

__all__ = ["CycleGuard"]


class CycleGuard:
    """Tracks the types currently under construction on this thread."""

    def __init__(self):
        self._local = threading.local()

    @property
    def _in_progress(self) -> set:
        if not hasattr(self._local, "in_progress"):
            self._local.in_progress = set()
        return self._local.in_progress

    def enter(self, concrete_type: Any):
        if concrete_type in self._in_progress:
            raise CircularDependencyError(concrete_type)
        self._in_progress.add(concrete_type)

    def leave(self, concrete_type: Any):
        self._in_progress.discard(concrete_type)

    def in_progress(self, concrete_type: Any) -> bool:
        return concrete_type in self._in_progress

    @contextmanager
    def constructing(self, concrete_type: Any) -> Iterator[None]:
        """Hold ``concrete_type`` as in progress for the duration of the block."""
        self.enter(concrete_type)
        try:
            yield
        finally:
            self.leave(concrete_type)
