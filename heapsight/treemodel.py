"""Tree of allocation costs per call-stack location, as shown in the bottom-up and top-down views."""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto
from typing import Callable

from .costs import AllocationData, ResultData, Symbol
from .util import FormatType, basename, format_bytes, format_cost_relative, symbol_to_string


class Role(Enum):
    """Kinds of data a view can ask the model for."""

    DISPLAY = auto()
    TOOLTIP = auto()
    INITIAL_SORT_ORDER = auto()
    SORT = auto()
    MAX_COST = auto()
    SYMBOL = auto()
    RESULT_DATA = auto()


class SortOrder(Enum):
    ASCENDING = auto()
    DESCENDING = auto()


class Column(IntEnum):
    LOCATION = 0
    PEAK = 1
    LEAKED = 2
    ALLOCATIONS = 3
    TEMPORARY = 4


NUM_COLUMNS = len(Column)

_COST_ATTRS = {
    Column.PEAK: "peak",
    Column.LEAKED: "leaked",
    Column.ALLOCATIONS: "allocations",
    Column.TEMPORARY: "temporary",
}

_HEADERS = {
    Column.ALLOCATIONS: "Allocations",
    Column.TEMPORARY: "Temporary",
    Column.PEAK: "Peak",
    Column.LEAKED: "Leaked",
    Column.LOCATION: "Location",
}

_HEADER_TOOLTIPS = {
    Column.ALLOCATIONS: "<qt>The number of times an allocation function was called from this location.</qt>",
    Column.TEMPORARY: (
        "<qt>The number of temporary allocations. These allocations are directly followed by a free "
        "without any other allocations in-between.</qt>"
    ),
    Column.PEAK: (
        "<qt>The contributions from a given location to the maximum heap memory consumption in bytes. "
        "This takes deallocations into account.</qt>"
    ),
    Column.LEAKED: "<qt>The bytes allocated at this location that have not been deallocated.</qt>",
    Column.LOCATION: (
        "<qt>The location from which an allocation function was called. Function symbol and file "
        "information may be unknown when debug information was missing when heaptrack was run.</qt>"
    ),
}

_BACKTRACE_DEPTH = 5


def _escape(text: str) -> str:
    return html.escape(text, quote=False).replace('"', "&quot;")


@dataclass(eq=False)
class RowData:
    """One node of the cost tree; ``parent`` is None for top-level rows."""

    cost: AllocationData = field(default_factory=AllocationData)
    symbol: Symbol = field(default_factory=Symbol)
    parent: RowData | None = field(default=None, repr=False)
    children: list[RowData] = field(default_factory=list)


@dataclass
class TreeData:
    rows: list[RowData] = field(default_factory=list)
    result_data: ResultData | None = None


class TreeModel:
    """Table-tree model over :class:`TreeData` with sort, tooltip and maximum-cost roles."""

    def __init__(self) -> None:
        self._data = TreeData()
        self._max_cost = RowData()
        self.reset_listeners: list[Callable[[], None]] = []

    def _notify_reset(self) -> None:
        for listener in list(self.reset_listeners):
            listener()

    @property
    def _result_data(self) -> ResultData:
        return self._data.result_data or ResultData()

    def header_data(self, section, role=Role.DISPLAY):
        try:
            column = Column(section)
        except ValueError:
            return None
        if role is Role.INITIAL_SORT_ORDER:
            return SortOrder.DESCENDING if column is not Column.LOCATION else None
        if role is Role.DISPLAY:
            return _HEADERS[column]
        if role is Role.TOOLTIP:
            return _HEADER_TOOLTIPS[column]
        return None

    def data(self, row, column, role=Role.DISPLAY):
        """Return the value for ``row`` in ``column``; ``row`` is ignored for the maximum-cost role."""
        try:
            column = Column(column)
        except ValueError:
            return None
        if role is Role.MAX_COST:
            row = self._max_cost
        if row is None:
            return None

        if role in (Role.DISPLAY, Role.SORT, Role.MAX_COST):
            if column is Column.LOCATION:
                return symbol_to_string(row.symbol, self._result_data, FormatType.SHORT)
            value = getattr(row.cost, _COST_ATTRS[column])
            if role is not Role.DISPLAY:
                return abs(value)
            if column in (Column.PEAK, Column.LEAKED):
                return format_bytes(value)
            return value
        if role is Role.TOOLTIP:
            return self._tooltip(row)
        if role is Role.SYMBOL:
            return row.symbol
        if role is Role.RESULT_DATA:
            return self._data.result_data
        return None

    def _describe(self, symbol: Symbol) -> str:
        strings = self._result_data
        module = strings.string(symbol.module_id)
        function = strings.string(symbol.function_id)
        return f"{_escape(function)}\n  in {_escape(basename(module))} ({_escape(module)})"

    def _tooltip(self, row: RowData) -> str:
        cost = row.cost
        total = self._max_cost.cost
        parts = ["<qt><pre style='font-family:monospace;'>", self._describe(row.symbol), "\n\n"]
        parts.append(
            f"peak contribution: {format_bytes(cost.peak)} "
            f"({format_cost_relative(cost.peak, total.peak)}% of total)\n"
        )
        parts.append(
            f"leaked: {format_bytes(cost.leaked)} "
            f"({format_cost_relative(cost.leaked, total.leaked)}% of total)\n"
        )
        parts.append(
            f"allocations: {cost.allocations} "
            f"({format_cost_relative(cost.allocations, total.allocations)}% of total)\n"
        )
        parts.append(
            f"temporary: {cost.temporary} "
            f"({format_cost_relative(cost.temporary, cost.allocations)}% of allocations, "
            f"{format_cost_relative(cost.temporary, total.temporary)}% of total)\n"
        )
        if row.children:
            child = row
            if len(child.children) == 1:
                parts.append("\nbacktrace:\n")
            remaining = _BACKTRACE_DEPTH
            while len(child.children) == 1 and remaining > 0:
                remaining -= 1
                parts.append("\n" + self._describe(child.symbol))
                child = child.children[0]
            if len(child.children) > 1:
                parts.append(f"\ncalled from {len(child.children)} locations")
        parts.append("</pre></qt>")
        return "".join(parts)

    def _siblings(self, parent: RowData | None) -> list[RowData]:
        return self._data.rows if parent is None else parent.children

    def index(self, row, parent=None):
        """Return the child at position ``row`` of ``parent`` (top level when None), or None."""
        siblings = self._siblings(parent)
        if 0 <= row < len(siblings):
            return siblings[row]
        return None

    def parent(self, row):
        return None if row is None else row.parent

    def row_of(self, row):
        """Return the position of ``row`` among its siblings."""
        siblings = self._siblings(row.parent)
        position = next((i for i, sibling in enumerate(siblings) if sibling is row), None)
        if position is None:
            raise ValueError("row does not belong to this model")
        return position

    def row_count(self, parent=None):
        return len(self._siblings(parent))

    def column_count(self):
        return NUM_COLUMNS

    def reset_data(self, data):
        if data.result_data is None:
            raise ValueError("tree data needs result data")
        self._data = data
        self._notify_reset()

    def set_summary(self, cost):
        self._max_cost.cost = cost
        self._notify_reset()

    def clear_data(self):
        self._data = TreeData()
        self._max_cost = RowData()
        self._notify_reset()