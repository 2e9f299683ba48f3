import threading

import pytest

from pinion.cycle_guard import CycleGuard
from pinion.errors import CircularDependencyError


class Thing:
    pass


def test_reentry_is_rejected():
    guard = CycleGuard()
    guard.enter(Thing)

    with pytest.raises(CircularDependencyError, match="Circular dependency detected"):
        guard.enter(Thing)


def test_leave_allows_reentry():
    guard = CycleGuard()
    guard.enter(Thing)
    guard.leave(Thing)
    guard.enter(Thing)

    assert guard.in_progress(Thing)


def test_constructing_releases_on_failure():
    guard = CycleGuard()

    with pytest.raises(RuntimeError):
        with guard.constructing(Thing):
            assert guard.in_progress(Thing)
            raise RuntimeError("constructor failed")

    assert not guard.in_progress(Thing)


def test_in_progress_set_is_per_thread():
    guard = CycleGuard()
    guard.enter(Thing)
    seen_on_other_thread = []

    thread = threading.Thread(target=lambda: seen_on_other_thread.append(guard.in_progress(Thing)))
    thread.start()
    thread.join()

    assert seen_on_other_thread == [False]
