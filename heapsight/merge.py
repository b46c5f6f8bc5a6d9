"""Merging of recorded allocations into a bottom-up cost tree, and its top-down counterpart."""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable

from .costs import AllocationData, FileLine, ResultData, Symbol
from .treemodel import RowData, TreeData

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Frame:
    """A resolved stack frame; function and file are string table indices."""

    function_index: int = 0
    file_index: int = 0
    line: int = 0


@dataclass
class InstructionPointer:
    """An instruction pointer with its frame, module and any frames inlined into it."""

    frame: Frame = field(default_factory=Frame)
    module_index: int = 0
    inlined: list[Frame] = field(default_factory=list)
    address: int = 0

    @property
    def symbol(self) -> Symbol:
        return Symbol(self.frame.function_index, self.module_index)


@dataclass(frozen=True)
class Trace:
    """One node of the recorded backtrace graph: an instruction pointer and the trace of its caller."""

    ip_index: int = 0
    parent_index: int = 0


@dataclass
class Allocation:
    """Costs attributed to one backtrace."""

    trace_index: int = 0
    cost: AllocationData = field(default_factory=AllocationData)


@dataclass
class TraceData:
    """Recorded traces, instruction pointers and allocations; indices into them are 1-based."""

    traces: list[Trace] = field(default_factory=list)
    instruction_pointers: list[InstructionPointer] = field(default_factory=list)
    allocations: list[Allocation] = field(default_factory=list)
    stop_indices: frozenset[int] = frozenset()

    @staticmethod
    def _lookup(items, index, default, kind):
        if not index:
            return default
        if index < 0 or index > len(items):
            raise IndexError(f"invalid {kind} index {index}")
        return items[index - 1]

    def find_trace(self, index):
        """Return the trace for a 1-based index; index 0 yields the empty trace."""
        return self._lookup(self.traces, index, Trace(), "trace")

    def find_ip(self, index):
        """Return the instruction pointer for a 1-based index; index 0 yields the empty one."""
        return self._lookup(self.instruction_pointers, index, InstructionPointer(), "instruction pointer")

    def is_stop_index(self, function_index):
        """Whether unwinding stops at a frame of this function, e.g. ``main``."""
        return function_index in self.stop_indices


@dataclass
class LocationCost:
    inclusive_cost: AllocationData = field(default_factory=AllocationData)
    self_cost: AllocationData = field(default_factory=AllocationData)


@dataclass
class CallerCalleeEntry:
    inclusive_cost: AllocationData = field(default_factory=AllocationData)
    self_cost: AllocationData = field(default_factory=AllocationData)
    source_map: dict[FileLine, LocationCost] = field(default_factory=dict)
    callers: dict[Symbol, AllocationData] = field(default_factory=dict)
    callees: dict[Symbol, AllocationData] = field(default_factory=dict)


@dataclass
class CallerCalleeResults:
    entries: dict[Symbol, CallerCalleeEntry] = field(default_factory=dict)
    result_data: ResultData | None = None


def _frame_location(frame: Frame, module_index: int) -> tuple[Symbol, FileLine]:
    return Symbol(frame.function_index, module_index), FileLine(frame.file_index, frame.line)


def _set_parents(children: list[RowData], parent: RowData | None) -> None:
    for row in children:
        row.parent = parent
        _set_parents(row.children, row)


def _add_caller_callee_event(
    symbol: Symbol,
    file_line: FileLine,
    cost: AllocationData,
    recursion_guard: set[Symbol],
    results: CallerCalleeResults,
) -> None:
    is_leaf = not recursion_guard
    if symbol in recursion_guard:
        return
    recursion_guard.add(symbol)
    entry = results.entries.setdefault(symbol, CallerCalleeEntry())
    location_cost = entry.source_map.setdefault(file_line, LocationCost())
    location_cost.inclusive_cost += cost
    if is_leaf:
        location_cost.self_cost += cost


def _add_row(rows: list[RowData], symbol: Symbol, cost: AllocationData) -> list[RowData]:
    position = bisect.bisect_left(rows, symbol, key=lambda row: row.symbol)
    if position < len(rows) and rows[position].symbol == symbol:
        row = rows[position]
        row.cost += cost
    else:
        row = RowData(cost=cost, symbol=symbol)
        rows.insert(position, row)
    return row.children


def merge_allocations(data, result_data=None, progress: Callable[[int], None] | None = None):
    """Build the bottom-up tree and the per-location caller/callee costs.

    ``progress`` is called with the percentage of allocations merged so far.
    """
    results = CallerCalleeResults()
    top_rows = TreeData()
    allocation_count = len(data.allocations)
    one_percent = max(1, allocation_count // 100)

    for done, allocation in enumerate(data.allocations, start=1):
        trace_index = allocation.trace_index
        cost = allocation.cost
        rows = top_rows.rows
        trace_guard = {trace_index}
        symbol_guard: set[Symbol] = set()
        first = True
        while trace_index or first:
            first = False
            trace = data.find_trace(trace_index)
            ip = data.find_ip(trace.ip_index)
            frames: Iterable[Frame] = [ip.frame, *ip.inlined]
            for frame in frames:
                symbol, file_line = _frame_location(frame, ip.module_index)
                rows = _add_row(rows, symbol, cost)
                _add_caller_callee_event(symbol, file_line, cost, symbol_guard, results)
            if data.is_stop_index(ip.frame.function_index):
                break
            trace_index = trace.parent_index
            if trace_index in trace_guard:
                logger.warning("Trace recursion detected - corrupt data file?")
                break
            trace_guard.add(trace_index)
        if progress is not None and done % one_percent == 0:
            progress(done * 100 // allocation_count)

    _set_parents(top_rows.rows, None)
    top_rows.result_data = result_data
    return top_rows, results


def _find_by_symbol(symbol: Symbol, rows: list[RowData]) -> RowData | None:
    return next((row for row in rows if row.symbol == symbol), None)


def _build_top_down(bottom_up: list[RowData], top_down: list[RowData]) -> AllocationData:
    total = AllocationData()
    for row in bottom_up:
        child_cost = _build_top_down(row.children, top_down)
        if child_cost != row.cost:
            # this row is (partially) a leaf: propagate its own cost up the caller chain
            cost = row.cost - child_cost
            node: RowData | None = row
            stack = top_down
            while node is not None:
                target = _find_by_symbol(node.symbol, stack)
                if target is None:
                    target = RowData(symbol=node.symbol)
                    stack.append(target)
                target.cost += cost
                stack = target.children
                node = node.parent
        total += row.cost
    return total


def to_top_down_data(bottom_up):
    """Invert a bottom-up tree so that outermost callers become the top-level rows."""
    top_rows = TreeData(result_data=bottom_up.result_data)
    _build_top_down(bottom_up.rows, top_rows.rows)
    _set_parents(top_rows.rows, None)
    return top_rows