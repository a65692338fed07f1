"""Process table ordering."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from sysdash.models import ProcessSnapshot


class SortColumn(Enum):
    """Sort columns for the process table."""

    CPU = "cpu"
    MEM = "mem"
    PID = "pid"
    NAME = "name"

    @property
    def default_descending(self) -> bool:
        """Usage columns read best largest-first, identity columns smallest-first."""
        return self in (SortColumn.CPU, SortColumn.MEM)


_SORT_KEYS = {
    SortColumn.CPU: lambda p: p.cpu_percent,
    SortColumn.MEM: lambda p: p.memory_percent,
    SortColumn.PID: lambda p: p.pid,
    SortColumn.NAME: lambda p: p.name.lower(),
}


@dataclass(slots=True, frozen=True)
class SortState:
    """The (column, direction) pair the process table is ordered by."""

    column: SortColumn = SortColumn.CPU
    descending: bool = True

    def select(self, column: SortColumn) -> "SortState":
        """Return the state after the user picks ``column``.

        Picking the active column flips the direction; picking another one
        switches to it with its default direction.
        """
        if column is self.column:
            return SortState(column, not self.descending)
        return SortState(column, column.default_descending)

    def cycle(self) -> "SortState":
        """Return the state for the next column in declaration order."""
        columns = list(SortColumn)
        next_column = columns[(columns.index(self.column) + 1) % len(columns)]
        return SortState(next_column, next_column.default_descending)


def sort_processes(
    processes: Iterable[ProcessSnapshot],
    column: SortColumn,
    descending: bool,
) -> list[ProcessSnapshot]:
    """Return the processes ordered by ``column``.

    ``sorted`` is stable in both directions, so records with equal keys keep
    the order the collector reported them in and re-sorting is idempotent.
    """
    return sorted(processes, key=_SORT_KEYS[column], reverse=descending)
