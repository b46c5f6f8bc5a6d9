"""Allocation size histogram: one row per size bucket, columns for the total and the top symbols."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, ClassVar

from .costs import ResultData, Symbol
from .treemodel import Role
from .util import FormatType, format_bytes, symbol_to_string

NUM_HISTOGRAM_COLUMNS = 10 + 1


def color_for_column(column, column_count):
    """Return the (hue, saturation, value) colour of a column, hues spread over 0..255."""
    if column_count <= 0:
        raise ValueError("column count must be positive")
    return (int(column / column_count * 255), 255, 255)


@dataclass
class HistogramColumn:
    allocations: int = 0
    total_allocated: int = 0
    symbol: Symbol = field(default_factory=Symbol)


def _empty_columns() -> list[HistogramColumn]:
    return [HistogramColumn() for _ in range(NUM_HISTOGRAM_COLUMNS)]


@dataclass
class HistogramRow:
    """A size bucket; column 0 holds the total, the others the top symbols."""

    NUM_COLUMNS: ClassVar[int] = NUM_HISTOGRAM_COLUMNS

    size_label: str = ""
    size: int = 0
    columns: list[HistogramColumn] = field(default_factory=_empty_columns)


@dataclass
class HistogramData:
    rows: list[HistogramRow] = field(default_factory=list)
    result_data: ResultData | None = None


class HistogramModel:
    """Table model over :class:`HistogramData`."""

    def __init__(self) -> None:
        self._data = HistogramData()
        self.reset_listeners: list[Callable[[], None]] = []

    def _notify_reset(self) -> None:
        for listener in list(self.reset_listeners):
            listener()

    def header_data(self, section, role=Role.DISPLAY):
        """Return the size label of a row."""
        if role is Role.DISPLAY and 0 <= section < len(self._data.rows):
            return self._data.rows[section].size_label
        return None

    def data(self, row, column, role=Role.DISPLAY):
        if not (0 <= row < self.row_count() and 0 <= column < self.column_count()):
            return None
        if role not in (Role.DISPLAY, Role.TOOLTIP):
            return None
        cell = self._data.rows[row].columns[column]
        if role is Role.TOOLTIP:
            if column == 0:
                return f"{cell.allocations} allocations in total"
            result_data = self._data.result_data or ResultData()
            average = int(cell.total_allocated / cell.allocations) if cell.allocations else 0
            return (
                f"{cell.allocations} allocations from "
                f"{symbol_to_string(cell.symbol, result_data, FormatType.LONG)}, "
                f"totalling {format_bytes(cell.total_allocated)} allocated with an average of "
                f"{format_bytes(average)} per allocation"
            )
        return cell.allocations

    def row_count(self):
        return len(self._data.rows)

    def column_count(self):
        return NUM_HISTOGRAM_COLUMNS

    def reset_data(self, data):
        if data.result_data is None:
            raise ValueError("histogram data needs result data")
        self._data = data
        self._notify_reset()

    def clear_data(self):
        self._data = HistogramData()
        self._notify_reset()