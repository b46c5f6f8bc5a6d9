"""List of the backtraces leading to the leaves below a selected tree row."""

from __future__ import annotations

from typing import Callable

from .treemodel import Column, Role, RowData


def _find_leaves(row: RowData):
    if not row.children:
        yield row
        return
    for child in row.children:
        yield from _find_leaves(child)


class StacksModel:
    """Shows one stack at a time, from the outermost caller down to the selected row."""

    def __init__(self, tree_model) -> None:
        self.tree_model = tree_model
        self._stacks: list[list[RowData]] = []
        self._stack_index = 0
        self.stacks_found_listeners: list[Callable[[int], None]] = []

    def _emit_stacks_found(self, count: int) -> None:
        for listener in list(self.stacks_found_listeners):
            listener(count)

    @property
    def stack_count(self) -> int:
        return len(self._stacks)

    def set_stack_index(self, index):
        """Select a stack by its 1-based number."""
        self._stack_index = index - 1

    def fill_from_row(self, row):
        stacks = []
        for leaf in _find_leaves(row):
            stack = []
            node = leaf
            while node is not None:
                stack.append(node)
                node = node.parent
            stack.reverse()
            stacks.append(stack)
        self._stacks = stacks
        self._stack_index = 0
        self._emit_stacks_found(len(self._stacks))

    def clear(self):
        self._stacks = []
        self._emit_stacks_found(0)

    def _current(self) -> list[RowData]:
        if 0 <= self._stack_index < len(self._stacks):
            return self._stacks[self._stack_index]
        return []

    def row_count(self):
        return len(self._current())

    def data(self, row, role=Role.DISPLAY):
        stack = self._current()
        if not 0 <= row < len(stack):
            return None
        return self.tree_model.data(stack[row], Column.LOCATION, role)

    def header_data(self, section, role=Role.DISPLAY):
        if section == 0 and role is Role.DISPLAY:
            return "Backtrace"
        return None