"""Cost records, symbols and the string table shared by the analysis views."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence


@dataclass(frozen=True)
class AllocationData:
    """Aggregated allocation costs of a location or a whole trace."""

    allocations: int = 0
    temporary: int = 0
    peak: int = 0
    leaked: int = 0

    def __add__(self, other: AllocationData) -> AllocationData:
        if not isinstance(other, AllocationData):
            return NotImplemented
        return AllocationData(
            self.allocations + other.allocations,
            self.temporary + other.temporary,
            self.peak + other.peak,
            self.leaked + other.leaked,
        )

    def __sub__(self, other: AllocationData) -> AllocationData:
        if not isinstance(other, AllocationData):
            return NotImplemented
        return AllocationData(
            self.allocations - other.allocations,
            self.temporary - other.temporary,
            self.peak - other.peak,
            self.leaked - other.leaked,
        )

    def __neg__(self) -> AllocationData:
        return AllocationData(-self.allocations, -self.temporary, -self.peak, -self.leaked)


@dataclass(frozen=True, order=True)
class Symbol:
    """A function within a module, both given as string table indices."""

    function_id: int = 0
    module_id: int = 0


@dataclass(frozen=True, order=True)
class FileLine:
    """A source location: a file given as string table index, and a line."""

    file_id: int = 0
    line: int = 0


@dataclass
class ResultData:
    """Total costs of a parse run together with its string table."""

    total_costs: AllocationData = field(default_factory=AllocationData)
    strings: Sequence[str] = ()

    def string(self, index: int) -> str:
        """Return the string for a 1-based index; index 0 stands for the empty string."""
        if not index:
            return ""
        if index < 0:
            raise IndexError(f"invalid string index {index}")
        return self.strings[index - 1]