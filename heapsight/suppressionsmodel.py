"""Table of leak suppression rules with their matches and suppressed leaked memory."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Callable

from .treemodel import Role, SortOrder
from .util import format_bytes, format_cost_relative


@dataclass
class Suppression:
    pattern: str
    matches: int = 0
    leaked: int = 0


class SuppressionColumn(IntEnum):
    MATCHES = 0
    LEAKED = 1
    PATTERN = 2


_HEADERS = {
    SuppressionColumn.MATCHES: "Matches",
    SuppressionColumn.LEAKED: "Leaked",
    SuppressionColumn.PATTERN: "Pattern",
}


class SuppressionsModel:
    """Table model over suppressions; ``Role.MAX_COST`` yields the total cost of a column."""

    def __init__(self) -> None:
        self._suppressions: list[Suppression] = []
        self._total_allocations = 0
        self._total_leaked = 0
        self.reset_listeners: list[Callable[[], None]] = []

    def set_suppressions(self, suppressions, total_allocations, total_leaked):
        self._suppressions = list(suppressions)
        self._total_allocations = total_allocations
        self._total_leaked = total_leaked
        for listener in list(self.reset_listeners):
            listener()

    def column_count(self):
        return len(SuppressionColumn) if self._suppressions else 0

    def row_count(self):
        return len(self._suppressions)

    def header_data(self, section, role=Role.DISPLAY):
        if not 0 <= section < self.column_count() or role is not Role.DISPLAY:
            return None
        return _HEADERS[SuppressionColumn(section)]

    def data(self, row, column, role=Role.DISPLAY):
        if not (0 <= row < self.row_count() and 0 <= column < self.column_count()):
            return None
        suppression = self._suppressions[row]

        if role is Role.TOOLTIP:
            return (
                f"<qt>Suppression rule: <code>{suppression.pattern}</code><br/>"
                f"Matched Allocations: {suppression.matches}<br/>&nbsp;&nbsp;"
                f"{format_cost_relative(suppression.matches, self._total_allocations)}% "
                f"out of {self._total_allocations} total<br/>"
                f"Suppressed Leaked Memory: {format_bytes(suppression.leaked)}<br/>&nbsp;&nbsp;"
                f"{format_cost_relative(suppression.leaked, self._total_leaked)}% "
                f"out of {format_bytes(self._total_leaked)} total</qt>"
            )

        column = SuppressionColumn(column)
        if column is SuppressionColumn.MATCHES:
            if role in (Role.DISPLAY, Role.SORT):
                return suppression.matches
            if role is Role.INITIAL_SORT_ORDER:
                return SortOrder.DESCENDING
            if role is Role.MAX_COST:
                return self._total_allocations
        elif column is SuppressionColumn.LEAKED:
            if role is Role.DISPLAY:
                return format_bytes(suppression.leaked)
            if role is Role.SORT:
                return suppression.leaked
            if role is Role.INITIAL_SORT_ORDER:
                return SortOrder.DESCENDING
            if role is Role.MAX_COST:
                return self._total_leaked
        else:
            if role in (Role.DISPLAY, Role.SORT):
                return suppression.pattern
            if role is Role.INITIAL_SORT_ORDER:
                return SortOrder.ASCENDING
        return None