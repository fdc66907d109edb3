"""Model — a ready-made attribute bag with KVO mixed in.

A Model declares one attribute per schema key. Subclasses can add class
level defaults and ``<key>_changed`` handlers, and bind to each other
directly:

    model = Model({"first_name": "Bill", "age": 25})
    controller = Model({"first_name": None})
    controller.bind_to("first_name", model)
    controller.get("first_name")  # "Bill"
"""

from __future__ import annotations

from kvobind.kvo import KVO


def _class_defaults(cls: type) -> list[str]:
    """Public, non-callable class attributes declared below Model."""
    keys: list[str] = []
    for klass in reversed(cls.__mro__):
        if klass in (object, KVO, Model):
            continue
        for key, value in vars(klass).items():
            if key.startswith("_") or key in keys:
                continue
            if callable(value) or isinstance(value, (property, staticmethod, classmethod)):
                continue
            keys.append(key)
    return keys


class Model(KVO):
    """Key-based attribute bag with bind_to/get/set."""

    def __init__(self, schema: dict[str, object] | None = None, initial: dict | None = None) -> None:
        self._keys: list[str] = _class_defaults(type(self))
        if initial:
            for key in self._keys:
                if key in initial:
                    setattr(self, key, initial[key])
        self.declare(schema or {}, initial)

    def keys(self) -> list[str]:
        """Declared attribute names, class level first, in declaration order."""
        return list(self._keys)

    def update(self, values: dict) -> None:
        for key, value in values.items():
            self.set(key, value)

    def declare(self, schema: dict[str, object], initial: dict | None = None) -> list[str]:
        """Add attributes with defaults. Existing attributes are untouched.

        Returns the names that were added.
        """
        added = []
        for key, default in schema.items():
            if key in self._keys:
                continue
            value = initial.get(key, default) if initial else default
            setattr(self, key, value)
            self._keys.append(key)
            added.append(key)
        return added

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={self.get(key)!r}" for key in self._keys)
        return f"{type(self).__name__}({fields})"
