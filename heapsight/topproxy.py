"""Top-level hot spots for one cost kind, hiding anything below 1% of the maximum."""

from __future__ import annotations

from enum import Enum

from .treemodel import Column, Role


class TopType(Enum):
    PEAK = Column.PEAK
    LEAKED = Column.LEAKED
    ALLOCATIONS = Column.ALLOCATIONS
    TEMPORARY = Column.TEMPORARY

    @property
    def column(self) -> Column:
        return self.value


class TopProxy:
    """Shows the top-level rows of a tree model with a noticeable cost of one kind."""

    def __init__(self, top_type, source_model=None) -> None:
        self.top_type = top_type
        self.source_model = None
        self._cost_threshold = 0
        if source_model is not None:
            self.set_source_model(source_model)

    @property
    def cost_threshold(self) -> int:
        return self._cost_threshold

    def accepts_column(self, column):
        return column == Column.LOCATION or column == self.top_type.column

    def accepts_row(self, row, parent=None):
        if parent is not None or self.source_model is None:
            return False
        index = self.source_model.index(row)
        if index is None:
            return False
        cost = self.source_model.data(index, self.top_type.column, Role.SORT)
        # zero costs show up when diffing files without change for this metric
        return bool(cost) and cost >= self._cost_threshold

    def set_source_model(self, model):
        previous = self.source_model
        if previous is not None and self.update_cost_threshold in previous.reset_listeners:
            previous.reset_listeners.remove(self.update_cost_threshold)
        self.source_model = model
        if self.update_cost_threshold not in model.reset_listeners:
            model.reset_listeners.append(self.update_cost_threshold)
        self.update_cost_threshold()

    def update_cost_threshold(self):
        model = self.source_model
        if model is None or model.row_count() == 0:
            self._cost_threshold = 0
            return
        max_cost = model.data(None, self.top_type.column, Role.MAX_COST)
        self._cost_threshold = int(max_cost * 0.01)

    def rows(self):
        """Accepted top-level rows, highest cost first."""
        model = self.source_model
        if model is None:
            return []
        accepted = [model.index(i) for i in range(model.row_count()) if self.accepts_row(i)]
        column = self.top_type.column
        return sorted(accepted, key=lambda row: model.data(row, column, Role.SORT), reverse=True)