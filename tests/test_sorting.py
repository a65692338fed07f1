"""Tests for process table sorting."""

import random

import pytest

from sysdash.sorting import SortColumn, SortState, sort_processes


@pytest.fixture
def processes(make_process):
    """Processes with deliberate ties on every usage column."""
    return [
        make_process(30, "zsh", cpu=5.0, mem=1.0),
        make_process(10, "Bash", cpu=5.0, mem=2.0),
        make_process(20, "python", cpu=50.0, mem=1.0),
        make_process(40, "bash", cpu=0.0, mem=2.0),
        make_process(50, "init", cpu=5.0, mem=0.5),
    ]


class TestSortProcesses:
    """Tests for sort_processes."""

    def test_cpu_descending(self, processes):
        result = sort_processes(processes, SortColumn.CPU, descending=True)
        assert [p.pid for p in result] == [20, 30, 10, 50, 40]

    def test_pid_ascending(self, processes):
        result = sort_processes(processes, SortColumn.PID, descending=False)
        assert [p.pid for p in result] == [10, 20, 30, 40, 50]

    def test_name_is_case_insensitive(self, processes):
        """Test 'Bash' and 'bash' tie and keep their input order."""
        result = sort_processes(processes, SortColumn.NAME, descending=False)
        assert [p.name for p in result] == ["Bash", "bash", "init", "python", "zsh"]

    @pytest.mark.parametrize("column", list(SortColumn))
    @pytest.mark.parametrize("descending", [True, False])
    def test_idempotent(self, processes, column, descending):
        """Test sorting a sorted list changes nothing."""
        once = sort_processes(processes, column, descending)
        twice = sort_processes(once, column, descending)
        assert twice == once

    @pytest.mark.parametrize("descending", [True, False])
    def test_stable_for_equal_keys(self, make_process, descending):
        """Test equal keys keep their input order in both directions."""
        rng = random.Random(7)
        procs = [make_process(pid, cpu=float(rng.randint(0, 3))) for pid in range(1, 200)]

        result = sort_processes(procs, SortColumn.CPU, descending)

        for cpu in {p.cpu_percent for p in procs}:
            expected = [p.pid for p in procs if p.cpu_percent == cpu]
            assert [p.pid for p in result if p.cpu_percent == cpu] == expected

    def test_returns_new_list(self, processes):
        """Test the input sequence is left untouched."""
        original = list(processes)
        sort_processes(processes, SortColumn.PID, descending=True)
        assert processes == original

    def test_empty(self):
        assert sort_processes([], SortColumn.MEM, descending=True) == []


class TestSortState:
    """Tests for SortState transitions."""

    def test_default(self):
        assert SortState() == SortState(SortColumn.CPU, True)

    def test_select_same_column_toggles(self):
        state = SortState(SortColumn.CPU, True)
        assert state.select(SortColumn.CPU) == SortState(SortColumn.CPU, False)

    def test_select_other_column_uses_default_direction(self):
        state = SortState(SortColumn.CPU, False)
        assert state.select(SortColumn.MEM) == SortState(SortColumn.MEM, True)
        assert state.select(SortColumn.PID) == SortState(SortColumn.PID, False)
        assert state.select(SortColumn.NAME) == SortState(SortColumn.NAME, False)

    def test_cycle_wraps(self):
        """Test cycling visits every column and wraps back to CPU."""
        state = SortState()
        seen = []
        for _ in range(len(SortColumn)):
            state = state.cycle()
            seen.append(state.column)
        assert seen == [SortColumn.MEM, SortColumn.PID, SortColumn.NAME, SortColumn.CPU]
