"""Formatting helpers for times, sizes, relative costs, symbols and tooltips."""

from __future__ import annotations

from enum import Enum
from typing import Callable

from .costs import AllocationData, FileLine, ResultData, Symbol

_BYTE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB")
_BYTE_BASE = 1024
_COST_LABELS = (
    ("Peak", "peak"),
    ("Leaked", "leaked"),
    ("Allocations", "allocations"),
    ("Temporary Allocations", "temporary"),
)


class FormatType(Enum):
    LONG = "long"
    SHORT = "short"


def _html_escape(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def basename(path: str) -> str:
    """Return the part of ``path`` after the last slash."""
    return path[path.rfind("/") + 1 :]


def format_string(text: str) -> str:
    return text if text else "??"


def format_time(ms: float) -> str:
    """Format a duration in milliseconds, e.g. ``1h02min03s`` or ``04.500s``."""
    ms = int(ms)
    is_negative = ms < 0
    ms = abs(ms)
    total_seconds, millis = divmod(ms, 1000)
    days = total_seconds // 86400
    hours = (total_seconds // 3600) % 24
    minutes = (total_seconds // 60) % 60
    seconds = total_seconds % 60

    def optional(fragment: int, unit: str) -> str:
        return f"{fragment}{unit}" if fragment > 0 else ""

    text = optional(days, "d") + optional(hours, "h") + optional(minutes, "min")
    show_ms = not text
    text += f"{seconds:02d}"
    if show_ms:
        text += f".{millis:03d}"
    text += "s"
    return "-" + text if is_negative else text


def format_bytes(size: int) -> str:
    """Format a byte count with binary multiples and metric unit names."""
    value = float(size)
    power = 0
    while abs(value) >= _BYTE_BASE and power < len(_BYTE_UNITS) - 1:
        value /= _BYTE_BASE
        power += 1
    precision = 0 if power == 0 else 1
    text = f"{value:.{precision}f}"
    if abs(float(text)) >= _BYTE_BASE and power < len(_BYTE_UNITS) - 1:
        value /= _BYTE_BASE
        power += 1
        text = f"{value:.1f}"
    return text + _BYTE_UNITS[power]


def format_cost_relative(self_cost: int, total_cost: int, add_percent_sign: bool = False) -> str:
    """Return ``self_cost`` as a percentage of ``total_cost`` with three significant digits."""
    if not total_cost:
        return ""
    text = format(self_cost * 100.0 / total_cost, ".3g")
    return text + "%" if add_percent_sign else text


def _cost_line(label: str, cost: int, total: int) -> str:
    return f"{label}: {cost}<br/>&nbsp;&nbsp;{format_cost_relative(cost, total)}% out of {total} total"


def _self_inclusive_costs(
    self_costs: AllocationData, inclusive_costs: AllocationData, result_data: ResultData
) -> str:
    totals = result_data.total_costs
    parts = []
    for label, attr in _COST_LABELS:
        total = getattr(totals, attr)
        if not total:
            continue
        parts.append(
            "<hr/>"
            + _cost_line(f"{label} (self)", getattr(self_costs, attr), total)
            + "<br/>"
            + _cost_line(f"{label} (inclusive)", getattr(inclusive_costs, attr), total)
        )
    return "".join(parts)


def _wrap(tooltip: str, costs: str) -> str:
    return f"<qt>{tooltip}{costs}</qt>"


def format_symbol_tooltip(symbol: Symbol, costs: AllocationData, result_data: ResultData) -> str:
    """Tooltip for a symbol listing each cost against the total."""
    totals = result_data.total_costs
    parts = []
    for label, attr in _COST_LABELS:
        total = getattr(totals, attr)
        if total:
            parts.append("<hr/>" + _cost_line(label, getattr(costs, attr), total))
    return _wrap(symbol_to_string(symbol, result_data, FormatType.LONG), "".join(parts))


def format_symbol_costs_tooltip(
    symbol: Symbol,
    self_costs: AllocationData,
    inclusive_costs: AllocationData,
    result_data: ResultData,
) -> str:
    """Tooltip for a symbol listing self and inclusive costs against the total."""
    return _wrap(
        symbol_to_string(symbol, result_data, FormatType.LONG),
        _self_inclusive_costs(self_costs, inclusive_costs, result_data),
    )


def format_location_tooltip(
    location: FileLine,
    self_costs: AllocationData,
    inclusive_costs: AllocationData,
    result_data: ResultData,
) -> str:
    """Tooltip for a source location listing self and inclusive costs against the total."""
    return _wrap(
        _html_escape(location_to_string(location, result_data, FormatType.LONG)),
        _self_inclusive_costs(self_costs, inclusive_costs, result_data),
    )


def symbol_to_string(symbol: Symbol, result_data: ResultData, format_type: FormatType) -> str:
    binary_path = result_data.string(symbol.module_id)
    binary_name = basename(binary_path)
    function = result_data.string(symbol.function_id)
    if format_type is FormatType.LONG:
        return (
            f"symbol: <tt>{_html_escape(function)}</tt><br/>"
            f"binary: <tt>{_html_escape(binary_name)} ({_html_escape(binary_path)})</tt>"
        )
    return f"{function} in {binary_name}"


def location_to_string(location: FileLine, result_data: ResultData, format_type: FormatType) -> str:
    file = result_data.string(location.file_id)
    if format_type is FormatType.SHORT:
        file = basename(file)
    return f"{file}:{location.line}" if file else "??"


def unresolved_function_name() -> str:
    return "<unresolved function>"


CostFormatter = Callable[[int], str]