"""Binding directory — the per-attribute metadata behind bound properties.

An attribute slot is a tagged union. Any ordinary value is a plain slot;
a ``Binding`` instance stored in the attribute marks it as bound and holds
the shared cell that has the real value, plus the cell's id in _anchor.

Each cell keeps its value and the ordered table of every (owner, key) pair
aliasing it. Removed observers leave a ``None`` tombstone so that the
indices stored in other Bindings stay valid.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, NamedTuple


class Entry(NamedTuple):
    """One (object, attribute) pair aliasing a cell."""

    owner: Any
    key: str


class Cell:
    """Canonical holder of a bound value and of its observer table."""

    __slots__ = ("value", "table", "__weakref__")

    def __init__(self, value: Any, table: list[Entry | None] | None = None) -> None:
        self.value = value
        self.table: list[Entry | None] = table if table is not None else []

    def live_entries(self, start: int = 0):
        """Yield (index, entry) for every non-tombstoned position from start."""
        for index in range(start, len(self.table)):
            entry = self.table[index]
            if entry is not None:
                yield index, entry

    def __repr__(self) -> str:
        live = sum(1 for entry in self.table if entry is not None)
        return f"Cell({self.value!r}, {live}/{len(self.table)} live)"


class Binding:
    """Descriptor stored in a bound attribute.

    self_index is this attribute's own position in its cell's table.
    proxy_indices are the positions of attributes that bound to *this*
    attribute (rather than to the group's root); offset propagation walks
    them when the group is merged after another one.
    """

    __slots__ = ("self_index", "proxy_indices", "cell_id", "_cell")

    def __init__(self, self_index: int, cell_id: int | None = None, cell: Cell | None = None) -> None:
        self.self_index = self_index
        self.proxy_indices: list[int] = []
        self.cell_id = cell_id
        self._cell = cell

    def attach(self, cell_id: int, cell: Cell) -> None:
        """Point this attribute at cell, which it then keeps alive."""
        self.cell_id = cell_id
        self._cell = cell

    @property
    def cell(self) -> Cell:
        return self._cell

    @property
    def is_root(self) -> bool:
        return self.self_index == 0

    def __repr__(self) -> str:
        return (
            f"Binding(index={self.self_index}, proxies={self.proxy_indices}, "
            f"cell={self.cell_id})"
        )


def is_bound(obj: object, key: str) -> bool:
    """Is ``obj.<key>`` bound, as either an observer or a target?"""
    return isinstance(getattr(obj, key, None), Binding)


def binding_of(obj: object, key: str) -> Binding:
    return getattr(obj, key)


def same_value(old: Any, new: Any) -> bool:
    return old is new or old == new


# ─── Change callbacks ────────────────────────────────────────────────────────


class ChangeCallback:
    """A resolved ``<key>_changed`` handler.

    The signature is inspected once, at resolution time, so notification
    only has to decide whether to pass the value.
    """

    __slots__ = ("fn", "takes_value", "needs_value")

    def __init__(self, fn: Callable) -> None:
        self.fn = fn
        self.takes_value, self.needs_value = _value_arity(fn)

    def notify(self, value: Any) -> None:
        """Called on a bound write: pass the value when the handler takes one."""
        if self.takes_value:
            self.fn(value)
        else:
            self.fn()

    def poke(self, current: Any) -> None:
        """Called on bind or plain write: no argument unless one is required."""
        if self.needs_value:
            self.fn(current)
        else:
            self.fn()

    def __repr__(self) -> str:
        name = getattr(self.fn, "__name__", repr(self.fn))
        return f"ChangeCallback({name})"


def _value_arity(fn: Callable) -> tuple[bool, bool]:
    """Return (accepts a positional value, requires one)."""
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return True, False
    for param in params:
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return True, False
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            return True, param.default is inspect.Parameter.empty
    return False, False


def callback_table(obj: object) -> dict[str, ChangeCallback]:
    """Explicit registrations made through KVO.observe."""
    return obj.__dict__.setdefault("_kvo_callbacks", {})


def resolve_callback(obj: object, key: str) -> ChangeCallback | None:
    """Look up the change handler for ``obj.<key>``.

    An explicit registration (see KVO.observe) wins. Otherwise the current
    ``<key>_changed`` attribute is used, so a handler assigned on the
    instance after binding replaces the method. Its signature is inspected
    only when the handler itself changes.
    """
    callback = callback_table(obj).get(key)
    if callback is not None:
        return callback
    fn = getattr(obj, f"{key}_changed", None)
    if not callable(fn):
        return None
    resolved = obj.__dict__.setdefault("_kvo_resolved", {})
    callback = resolved.get(key)
    if callback is None or callback.fn != fn:
        callback = resolved[key] = ChangeCallback(fn)
    return callback
