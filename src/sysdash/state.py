"""Application state owned by the event coordinator."""

from dataclasses import dataclass, field
from enum import Enum

from sysdash.sorting import SortColumn, SortState


class Panel(Enum):
    """Dashboard panels, in left-to-right navigation order."""

    CPU = "cpu"
    MEMORY = "memory"
    NETWORK = "network"
    DISK = "disk"
    TEMPERATURE = "temperature"
    PROCESS = "process"


SORT_KEYS = {
    "c": SortColumn.CPU,
    "m": SortColumn.MEM,
    "p": SortColumn.PID,
    "n": SortColumn.NAME,
}


@dataclass
class AppState:
    """Selection, sort order and quit flag; mutated only from user input."""

    panel: Panel = Panel.PROCESS
    selected_process: int = 0
    process_count: int = 0
    sort: SortState = field(default_factory=SortState)
    should_quit: bool = False
    to_be_resorted: bool = False

    def on_left(self) -> None:
        panels = list(Panel)
        self.panel = panels[(panels.index(self.panel) - 1) % len(panels)]

    def on_right(self) -> None:
        panels = list(Panel)
        self.panel = panels[(panels.index(self.panel) + 1) % len(panels)]

    def on_up(self) -> None:
        self.decrement_position()

    def on_down(self) -> None:
        self.increment_position()

    def on_char(self, char: str) -> None:
        """Handle a plain character key; unknown characters are no-ops."""
        if char == "q":
            self.should_quit = True
        elif char in SORT_KEYS:
            self.set_sort(self.sort.select(SORT_KEYS[char]))

    def cycle_sort(self) -> None:
        self.set_sort(self.sort.cycle())

    def set_sort(self, sort: SortState) -> None:
        """Switch sort order; the selection goes back to the top row."""
        self.sort = sort
        self.selected_process = 0
        self.to_be_resorted = True

    def decrement_position(self) -> None:
        if self.selected_process > 0:
            self.selected_process -= 1

    def increment_position(self) -> None:
        if self.selected_process < self.process_count - 1:
            self.selected_process += 1

    def set_process_count(self, count: int) -> None:
        """Record the table size, pulling the selection back inside it."""
        self.process_count = count
        self.selected_process = max(0, min(self.selected_process, count - 1))
