"""Textual integration for kvobind. Opt-in — requires textual.

Views bind to controllers like any other object, but a change handler that
touches widgets has to cope with an app that is not running, a widget tree
being replaced, widgets that are not mounted yet, and writes arriving from
worker threads. observe() wraps a handler with all four guards.
"""

import logging
import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

logger = logging.getLogger("kvobind.textual")

# Module-owned pause state — keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend guarded handlers during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def observe(app, obj, key, effect_fn):
    """Call effect_fn(obj.get(key)) whenever obj.<key> changes.

    Skips while the app is paused or not running, swallows NoMatches from
    widget queries, and marshals calls from other threads through
    app.call_from_thread. Returns the disposer from KVO.observe.
    """
    _main = threading.get_ident()

    def _guarded(value=None):
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe)
        else:
            _safe()

    def _safe():
        try:
            effect_fn(obj.get(key))
        except NoMatches:
            logger.debug("No widget for %s.%s yet, skipped", type(obj).__name__, key)

    return obj.observe(key, _guarded)
