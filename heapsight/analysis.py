"""Caller/callee aggregation and the allocation size histogram built from merged trace data."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from .costs import AllocationData, Symbol
from .histogrammodel import HistogramColumn, HistogramData, HistogramRow
from .merge import CallerCalleeEntry, CallerCalleeResults
from .treemodel import RowData

_SIZE_BUCKETS = (
    (8, "0B to 8B"),
    (16, "9B to 16B"),
    (32, "17B to 32B"),
    (64, "33B to 64B"),
    (128, "65B to 128B"),
    (256, "129B to 256B"),
    (512, "257B to 512B"),
    (1024, "512B to 1KB"),
    (2**64 - 1, "more than 1KB"),
)


@dataclass(frozen=True)
class AllocationInfo:
    """A requested allocation size and the 0-based index of the allocation it belongs to."""

    size: int = 0
    allocation_index: int = 0


@dataclass
class CountedAllocationInfo:
    """How often an allocation info was encountered; ordered by size, then count."""

    info: AllocationInfo = field(default_factory=AllocationInfo)
    allocations: int = 0

    def sort_key(self) -> tuple[int, int]:
        return (self.info.size, self.allocations)

    def __lt__(self, other: CountedAllocationInfo) -> bool:
        if not isinstance(other, CountedAllocationInfo):
            return NotImplemented
        return self.sort_key() < other.sort_key()


def _build_caller_callee(rows: list[RowData], results: CallerCalleeResults) -> AllocationData:
    total = AllocationData()
    for row in rows:
        child_cost = _build_caller_callee(row.children, results)
        if child_cost != row.cost:
            # this row is (partially) a leaf: walk its chain, counting each symbol once
            cost = row.cost - child_cost
            recursion_guard: set[Symbol] = set()
            pair_guard: set[tuple[Symbol, Symbol]] = set()
            last_symbol: Symbol | None = None
            last_entry: CallerCalleeEntry | None = None
            node: RowData | None = row
            while node is not None:
                symbol = node.symbol
                entry = results.entries.setdefault(symbol, CallerCalleeEntry())
                if symbol not in recursion_guard:
                    recursion_guard.add(symbol)
                    entry.inclusive_cost += cost
                if node.parent is None:
                    entry.self_cost += cost
                if last_entry is not None and (symbol, last_symbol) not in pair_guard:
                    pair_guard.add((symbol, last_symbol))
                    last_entry.callees[symbol] = last_entry.callees.get(symbol, AllocationData()) + cost
                    entry.callers[last_symbol] = entry.callers.get(last_symbol, AllocationData()) + cost
                node = node.parent
                last_symbol = symbol
                last_entry = entry
        total += row.cost
    return total


def to_caller_callee_data(bottom_up, results, diff_mode=False):
    """Add inclusive, self, caller and callee costs to a copy of ``results``.

    In diff mode, entries without any inclusive or self cost are dropped.
    """
    caller_callee = copy.deepcopy(results)
    _build_caller_callee(bottom_up.rows, caller_callee)
    if diff_mode:
        empty = AllocationData()
        caller_callee.entries = {
            symbol: entry
            for symbol, entry in caller_callee.entries.items()
            if entry.inclusive_cost != empty or entry.self_cost != empty
        }
    caller_callee.result_data = bottom_up.result_data
    return caller_callee


def _new_row(bucket_index: int) -> HistogramRow:
    size, label = _SIZE_BUCKETS[bucket_index]
    return HistogramRow(size_label=label, size=size)


def _insert_columns(row: HistogramRow, column_data: dict[Symbol, list[int]]) -> None:
    by_symbol = sorted(column_data.items())
    ranked = sorted(by_symbol, key=lambda item: (item[1][0], item[1][1]), reverse=True)
    for position, (symbol, (allocations, total_allocated)) in enumerate(
        ranked[: HistogramRow.NUM_COLUMNS - 1], start=1
    ):
        row.columns[position] = HistogramColumn(allocations, total_allocated, symbol)


def build_size_histogram(counted_infos, data, result_data=None):
    """Group counted allocation sizes into buckets, with the top symbols of each bucket."""
    histogram = HistogramData()
    infos = sorted(counted_infos)
    if not infos:
        return histogram

    bucket_index = 0
    row = _new_row(bucket_index)
    column_data: dict[Symbol, list[int]] = {}
    for counted in infos:
        size = counted.info.size
        count = counted.allocations
        allocated = size * count
        if size > row.size:
            _insert_columns(row, column_data)
            column_data = {}
            histogram.rows.append(row)
            bucket_index += 1
            row = _new_row(bucket_index)
            row.columns[0] = HistogramColumn(count, allocated)
        else:
            total = row.columns[0]
            total.allocations += count
            total.total_allocated += allocated
        allocation = data.allocations[counted.info.allocation_index]
        ip = data.find_ip(data.find_trace(allocation.trace_index).ip_index)
        stats = column_data.setdefault(ip.symbol, [0, 0])
        stats[0] += count
        stats[1] += allocated
    _insert_columns(row, column_data)
    histogram.rows.append(row)
    histogram.result_data = result_data
    return histogram