"""kvobind: key value observing through shared attribute bindings."""

from importlib.metadata import version as _version

__version__ = _version("kvobind")

from kvobind.binding import is_bound
from kvobind.errors import (
    KVOError,
    MissingAttribute,
    AlreadySourced,
    CircularBinding,
    UndefinedAttribute,
    NotBound,
)
from kvobind.kvo import KVO, set_scheduler
from kvobind.model import Model
# textual NOT auto-imported — opt-in only

__all__ = [
    "KVO",
    "Model",
    "set_scheduler",
    "is_bound",
    "KVOError",
    "MissingAttribute",
    "AlreadySourced",
    "CircularBinding",
    "UndefinedAttribute",
    "NotBound",
]
