"""Errors raised by the binding engine.

Every check runs before the engine touches any cell or descriptor, so a
raised error always leaves the existing bindings exactly as they were.
"""

from __future__ import annotations


class KVOError(Exception):
    """Base class for binding errors. ``key`` is the offending attribute."""

    def __init__(self, message: str, key: str) -> None:
        super().__init__(message)
        self.key = key


class MissingAttribute(KVOError, AttributeError):
    """bind_to() target does not declare the requested attribute."""

    def __init__(self, key: str) -> None:
        super().__init__(f'Undefined: property "{key}" on target object.', key)


class AlreadySourced(KVOError, ValueError):
    """bind_to() source already observes another attribute."""

    def __init__(self, key: str) -> None:
        super().__init__(f'"{key}" is already bound.', key)


class CircularBinding(KVOError, ValueError):
    """bind_to() source and target already share one cell."""

    def __init__(self, key: str, target_key: str) -> None:
        super().__init__(
            f'"{key}" and target "{target_key}" are already bound together.', key
        )


class UndefinedAttribute(KVOError, AttributeError):
    """set() or observe() on an attribute the object never declared."""

    def __init__(self, key: str) -> None:
        super().__init__(f'Cannot set value for undefined property "{key}".', key)


class NotBound(KVOError, AttributeError):
    """unbind() on an attribute that holds a plain value."""

    def __init__(self, key: str) -> None:
        super().__init__(f'"{key}" is not bound.', key)
