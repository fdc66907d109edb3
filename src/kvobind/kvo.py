"""KVO — key value observing through permanently shared attributes.

An object that ``bind_to``s an attribute on another object becomes a proxy
for it: both attributes alias one shared cell, writing through either side
updates the single value, and every participant's ``<key>_changed`` handler
is called. Chains work transitively — a view bound to a controller that is
bound to a model ends up on the model's cell.

Usage:
    class Person(KVO):
        def __init__(self):
            self.name = "Bob"

    class Controller(KVO):
        name = None

        def name_changed(self, name=None):
            print(self.get("name"))

    controller, person = Controller(), Person()
    controller.bind_to("name", person)  # prints Bob
    person.set("name", "Bill")          # prints Bill
    controller.set("name", "Mark")      # prints Mark

Merging rewrites the Binding of every attribute that joins a group, on
whatever object owns it. Attribute metadata must therefore never be assumed
stable once another object binds into the same group; always go through
get()/set().

Thread safety: none inside the engine. Call set_scheduler() once from the
owning thread and set() from any other thread is handed to the scheduler.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from kvobind import _anchor
from kvobind.binding import (
    Binding,
    Cell,
    ChangeCallback,
    Entry,
    binding_of,
    callback_table,
    is_bound,
    resolve_callback,
    same_value,
)
from kvobind.errors import (
    AlreadySourced,
    CircularBinding,
    MissingAttribute,
    NotBound,
    UndefinedAttribute,
)

logger = logging.getLogger("kvobind.kvo")

# ─── Auto-marshal ────────────────────────────────────────────────────────────
_scheduler = None
_scheduler_thread = None


def set_scheduler(scheduler) -> None:
    """Set the global scheduler for cross-thread writes.

    Call once from the thread that owns the bound objects:
        kvobind.set_scheduler(app.call_from_thread)

    After this, any KVO.set() from another thread is passed to the scheduler
    as a zero-argument callable. Writes from the owning thread stay
    synchronous. set_scheduler(None) turns marshaling off.
    """
    global _scheduler, _scheduler_thread
    _scheduler = scheduler
    _scheduler_thread = threading.current_thread() if scheduler is not None else None


def _name(obj: object, key: str) -> str:
    return f"{type(obj).__name__}.{key}"


def _promote_root(obj: object, key: str) -> Binding:
    """Turn a plain attribute into the root (index 0) of a fresh cell."""
    cell = Cell(getattr(obj, key), [Entry(obj, key)])
    cell_id = _anchor.add_cell(cell)
    binding = Binding(0, cell_id, cell)
    setattr(obj, key, binding)
    logger.debug("Promoted %s to root of cell %d", _name(obj, key), cell_id)
    return binding


def _propagate_offset(obj: object, key: str, offset_increase: int) -> None:
    """Shift every index held by obj.<key> and its chained proxies.

    Runs before the attribute's table is appended after another one, so the
    stored positions are already correct once the concatenation happens.
    """
    binding = binding_of(obj, key)
    binding.self_index += offset_increase
    table = binding.cell.table
    for i, index in enumerate(binding.proxy_indices):
        entry = table[index]
        # Tombstones have no owner to visit
        if entry is not None:
            _propagate_offset(entry.owner, entry.key, offset_increase)
        binding.proxy_indices[i] = index + offset_increase


class KVO:
    """Mixin giving an object bind_to/get/set over its attributes.

    The mixin keeps no state of its own beyond a lazily created callback
    table, so it can be mixed into any class whose instances have a
    ``__dict__``.
    """

    def bind_to(
        self,
        key: str,
        target: object,
        target_key: str | None = None,
        no_notify: bool = False,
    ) -> None:
        """Bind self.<key> to target.<target_key>.

        target_key defaults to key. Handlers of every attribute that joins
        the target's group are called when its value changes as a result,
        except this attribute's own handler when no_notify is set.
        """
        target_key = target_key or key

        if not hasattr(target, target_key):
            raise MissingAttribute(target_key)

        target_binding = getattr(target, target_key)
        if not isinstance(target_binding, Binding):
            target_binding = None

        source: Binding | None = None
        if is_bound(self, key):
            source = binding_of(self, key)
            if not source.is_root:
                raise AlreadySourced(key)
            if target_binding is not None and target_binding.cell_id == source.cell_id:
                raise CircularBinding(key, target_key)
        elif target is self and target_key == key:
            raise CircularBinding(key, target_key)

        if target_binding is None:
            target_binding = _promote_root(target, target_key)

        cell_id = target_binding.cell_id
        cell = target_binding.cell
        # Number of observers before binding
        n = len(cell.table)
        target_binding.proxy_indices.append(n)

        if source is not None:
            source_cell_id = source.cell_id
            source_cell = source.cell
            _propagate_offset(self, key, n)
            cell.table.extend(source_cell.table)
            prior = source_cell.value
            _anchor.discard_cell(source_cell_id)
            logger.debug(
                "Merged cell %d into cell %d at offset %d (%d entries)",
                source_cell_id, cell_id, n, len(cell.table),
            )
        else:
            prior = getattr(self, key, None)
            setattr(self, key, Binding(n))
            cell.table.append(Entry(self, key))
            logger.debug(
                "Bound %s to %s at index %d of cell %d",
                _name(self, key), _name(target, target_key), n, cell_id,
            )

        # Every joining attribute points at the surviving cell before any handler runs
        joined = []
        for index, entry in cell.live_entries(n):
            binding_of(entry.owner, entry.key).attach(cell_id, cell)
            joined.append((index, resolve_callback(entry.owner, entry.key)))

        for index, callback in joined:
            if callback is None or (index == n and no_notify):
                continue
            # Unchanged, or restored to prior by an earlier handler
            if same_value(cell.value, prior):
                continue
            callback.poke(cell.value)

    def unbind(self, key: str) -> None:
        """Detach self.<key> from its group, keeping the current value.

        The attribute's table position becomes a tombstone; no other index
        moves. Attributes chained off this one stay in the group. No handler
        is called.
        """
        if not is_bound(self, key):
            raise NotBound(key)

        binding = binding_of(self, key)
        cell_id = binding.cell_id
        cell = binding.cell
        index = binding.self_index

        # Hand our proxies to whichever attribute we were chained off
        for _, entry in cell.live_entries():
            if entry.owner is self and entry.key == key:
                continue
            parent = binding_of(entry.owner, entry.key)
            if index in parent.proxy_indices:
                pos = parent.proxy_indices.index(index)
                parent.proxy_indices[pos:pos + 1] = binding.proxy_indices
                break

        cell.table[index] = None
        setattr(self, key, cell.value)
        logger.debug("Unbound %s from index %d of cell %d", _name(self, key), index, cell_id)

        if all(entry is None for entry in cell.table):
            _anchor.discard_cell(cell_id)
            logger.debug("Discarded empty cell %d", cell_id)

    def get(self, key: str) -> Any:
        """Return the value of self.<key>; None when it was never declared."""
        value = getattr(self, key, None)
        if isinstance(value, Binding):
            return value.cell.value
        return value

    def set(self, key: str, value: Any, force_callback: bool = False) -> None:
        """Write self.<key> and notify. Auto-marshals from foreign threads.

        force_callback calls the handlers of a bound attribute even when the
        value is unchanged.
        """
        if not hasattr(self, key):
            raise UndefinedAttribute(key)

        if _scheduler is not None and threading.current_thread() != _scheduler_thread:
            _scheduler(lambda: self._set_direct(key, value, force_callback))
        else:
            self._set_direct(key, value, force_callback)

    def _set_direct(self, key: str, value: Any, force_callback: bool) -> None:
        slot = getattr(self, key)

        if isinstance(slot, Binding):
            cell = slot.cell
            if same_value(cell.value, value) and not force_callback:
                return
            cell.value = value
            # Snapshot: handlers may bind or write re-entrantly
            for _, entry in list(cell.live_entries()):
                callback = resolve_callback(entry.owner, entry.key)
                if callback is not None:
                    callback.notify(value)
            return

        if same_value(slot, value):
            return
        setattr(self, key, value)
        callback = resolve_callback(self, key)
        if callback is not None:
            callback.poke(value)

    def observe(self, key: str, fn: Callable) -> Callable[[], None]:
        """Register fn as the change handler for self.<key>.

        Takes precedence over a ``<key>_changed`` method. Returns a function
        that removes the registration.
        """
        if not hasattr(self, key):
            raise UndefinedAttribute(key)

        callback = ChangeCallback(fn)
        table = callback_table(self)
        table[key] = callback

        def _dispose() -> None:
            if table.get(key) is callback:
                del table[key]

        return _dispose
