"""Data anchor — the arena that indexes every live shared value cell.

The arena holds cells weakly. Each Binding keeps its own cell alive, so a
cell lives exactly as long as some bound attribute still refers to it; a
group the program drops is collected together with its owners. Merged-away
and fully tombstoned cells are removed eagerly.
"""

from __future__ import annotations

import itertools
import weakref
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kvobind.binding import Cell

cells: weakref.WeakValueDictionary[int, Cell] = weakref.WeakValueDictionary()

# ID generation — itertools.count is thread-safe (C-level GIL atomic)
_id_counter = itertools.count(1)


def new_id() -> int:
    return next(_id_counter)


def add_cell(cell: Cell) -> int:
    cell_id = new_id()
    cells[cell_id] = cell
    return cell_id


def discard_cell(cell_id: int) -> None:
    cells.pop(cell_id, None)
