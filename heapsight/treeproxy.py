"""Filtering by function and module name, and sorting, over a tree model."""

from __future__ import annotations

from .treemodel import Role
from .util import basename


class TreeProxy:
    """Accepts rows whose function and module names contain the filter texts, ignoring case."""

    def __init__(
        self,
        source_model=None,
        symbol_role=Role.SYMBOL,
        result_data_role=Role.RESULT_DATA,
        sort_role=Role.SORT,
    ) -> None:
        self.source_model = source_model
        self.symbol_role = symbol_role
        self.result_data_role = result_data_role
        self.sort_role = sort_role
        self.function_filter = ""
        self.module_filter = ""

    def set_function_filter(self, function_filter):
        self.function_filter = function_filter

    def set_module_filter(self, module_filter):
        self.module_filter = module_filter

    def accepts_row(self, row):
        source = self.source_model
        if source is None:
            return False
        if not self.function_filter and not self.module_filter:
            return True
        result_data = source.data(row, 0, self.result_data_role)
        if result_data is None:
            raise ValueError("source model has no result data")
        symbol = source.data(row, 0, self.symbol_role)

        def filter_out(string_id: int, text: str) -> bool:
            return bool(text) and text.casefold() not in result_data.string(string_id).casefold()

        return not (
            filter_out(symbol.function_id, self.function_filter)
            or filter_out(symbol.module_id, self.module_filter)
        )

    def less_than(self, left, right, sort_column):
        """Order two rows; the location column sorts by function name, then module basename."""
        source = self.source_model
        if sort_column != 0:
            return source.data(left, sort_column, self.sort_role) < source.data(
                right, sort_column, self.sort_role
            )
        result_data = source.data(left, 0, self.result_data_role)
        symbol_left = source.data(left, 0, self.symbol_role)
        symbol_right = source.data(right, 0, self.symbol_role)
        if symbol_left.function_id != symbol_right.function_id:
            return result_data.string(symbol_left.function_id) < result_data.string(
                symbol_right.function_id
            )
        return basename(result_data.string(symbol_left.module_id)) < basename(
            result_data.string(symbol_right.module_id)
        )