"""Tests for set_scheduler — cross-thread write marshaling."""

import threading

import pytest

from kvobind import KVO, UndefinedAttribute, set_scheduler


class Thing(KVO):
    def __init__(self, **attrs):
        for key, value in attrs.items():
            setattr(self, key, value)


@pytest.fixture
def queued():
    """Install a scheduler that queues writes until drained."""
    pending = []
    set_scheduler(pending.append)
    yield pending
    set_scheduler(None)


def _in_thread(fn):
    t = threading.Thread(target=fn)
    t.start()
    t.join()


class TestScheduler:
    def test_owner_thread_writes_inline(self, queued):
        a, b = Thing(x=0), Thing(x=0)
        b.bind_to("x", a)
        a.set("x", 1)
        assert b.get("x") == 1
        assert queued == []

    def test_foreign_thread_writes_are_marshaled(self, queued):
        a, b = Thing(x=0), Thing(x=0)
        b.bind_to("x", a)
        log = []
        b.observe("x", lambda value: log.append((value, threading.current_thread())))

        _in_thread(lambda: a.set("x", 1))
        assert b.get("x") == 0
        assert len(queued) == 1

        queued.pop()()
        assert b.get("x") == 1
        assert log == [(1, threading.current_thread())]

    def test_undeclared_key_raises_in_calling_thread(self, queued):
        errors = []

        def _bad():
            try:
                Thing().set("nope", 1)
            except UndefinedAttribute as exc:
                errors.append(exc)

        _in_thread(_bad)
        assert len(errors) == 1
        assert queued == []

    def test_no_scheduler_writes_inline_from_any_thread(self):
        set_scheduler(None)
        a = Thing(x=0)
        _in_thread(lambda: a.set("x", 1))
        assert a.get("x") == 1
