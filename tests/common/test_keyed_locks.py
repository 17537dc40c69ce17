from __future__ import annotations

import threading

import pytest

from staffing.common.locks import KeyedLocks


def test_lock_is_dropped_after_release():
    locks = KeyedLocks()
    with locks.hold(("w1", "2026-03-02")):
        assert len(locks) == 1
    assert len(locks) == 0


def test_lock_is_dropped_when_the_block_raises():
    locks = KeyedLocks()
    with pytest.raises(RuntimeError):
        with locks.hold("w1"):
            raise RuntimeError("boom")
    assert len(locks) == 0


def test_waiters_share_the_lock_until_the_last_one_leaves():
    locks = KeyedLocks()
    inside = []
    release = threading.Event()
    entered = threading.Event()

    def first():
        with locks.hold("w1"):
            entered.set()
            release.wait(timeout=5)
            inside.append("first")

    def second():
        with locks.hold("w1"):
            inside.append("second")

    t1 = threading.Thread(target=first)
    t1.start()
    entered.wait(timeout=5)
    t2 = threading.Thread(target=second)
    t2.start()

    # second is blocked behind first; both hold a reference to the same slot.
    t2.join(timeout=0.1)
    assert inside == []
    release.set()
    t1.join()
    t2.join()

    assert inside == ["first", "second"]
    assert len(locks) == 0
