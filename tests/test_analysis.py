import pytest

from heapsight.analysis import (
    AllocationInfo,
    CountedAllocationInfo,
    build_size_histogram,
    to_caller_callee_data,
)
from heapsight.costs import AllocationData, ResultData, Symbol
from heapsight.merge import (
    Allocation,
    CallerCalleeEntry,
    CallerCalleeResults,
    Frame,
    InstructionPointer,
    Trace,
    TraceData,
    merge_allocations,
)

COST = AllocationData(allocations=3, temporary=1, peak=100, leaked=50)
RESULT = ResultData(total_costs=COST, strings=["alloc_fn", "main", "libfoo.so", "recurse"])
ALLOC = Symbol(1, 3)
MAIN = Symbol(2, 3)
REC = Symbol(4, 3)


def simple_data():
    ips = [
        InstructionPointer(frame=Frame(function_index=1), module_index=3),
        InstructionPointer(frame=Frame(function_index=2), module_index=3),
    ]
    traces = [Trace(ip_index=1, parent_index=2), Trace(ip_index=2, parent_index=0)]
    return TraceData(traces=traces, instruction_pointers=ips, allocations=[Allocation(1, COST)])


def recursive_data():
    ips = [
        InstructionPointer(frame=Frame(function_index=1), module_index=3, address=1),
        InstructionPointer(frame=Frame(function_index=2), module_index=3, address=2),
        InstructionPointer(frame=Frame(function_index=4), module_index=3, address=3),
        InstructionPointer(frame=Frame(function_index=4), module_index=3, address=4),
    ]
    traces = [
        Trace(ip_index=1, parent_index=2),
        Trace(ip_index=3, parent_index=3),
        Trace(ip_index=4, parent_index=4),
        Trace(ip_index=2, parent_index=0),
    ]
    return TraceData(traces=traces, instruction_pointers=ips, allocations=[Allocation(1, COST)])


def test_caller_callee_simple_chain():
    bottom_up, results = merge_allocations(simple_data(), RESULT)
    cc = to_caller_callee_data(bottom_up, results, False)
    assert cc.entries[ALLOC].self_cost == COST
    assert cc.entries[ALLOC].inclusive_cost == COST
    assert cc.entries[MAIN].inclusive_cost == COST
    assert cc.entries[MAIN].self_cost == AllocationData()
    assert cc.entries[ALLOC].callers == {MAIN: COST}
    assert cc.entries[MAIN].callees == {ALLOC: COST}
    assert cc.result_data is RESULT


def test_caller_callee_keeps_source_map():
    bottom_up, results = merge_allocations(simple_data(), RESULT)
    cc = to_caller_callee_data(bottom_up, results, False)
    assert cc.entries[ALLOC].source_map == results.entries[ALLOC].source_map


def test_recursion_counted_once():
    bottom_up, results = merge_allocations(recursive_data(), RESULT)
    cc = to_caller_callee_data(bottom_up, results, False)
    assert cc.entries[REC].inclusive_cost == COST
    assert cc.entries[REC].callers[MAIN] == COST
    assert cc.entries[MAIN].callees[REC] == COST


def test_callers_and_callees_are_symmetric():
    bottom_up, results = merge_allocations(recursive_data(), RESULT)
    cc = to_caller_callee_data(bottom_up, results, False)
    for symbol, entry in cc.entries.items():
        for callee, cost in entry.callees.items():
            assert cc.entries[callee].callers[symbol] == cost


def test_input_results_not_modified():
    bottom_up, results = merge_allocations(simple_data(), RESULT)
    before = results.entries[MAIN].inclusive_cost
    to_caller_callee_data(bottom_up, results, False)
    assert results.entries[MAIN].inclusive_cost == before
    assert results.entries[MAIN].callees == {}


@pytest.mark.parametrize("diff_mode, kept", [(False, True), (True, False)])
def test_diff_mode_removes_empty_entries(diff_mode, kept):
    bottom_up, results = merge_allocations(simple_data(), RESULT)
    results.entries[Symbol(9, 9)] = CallerCalleeEntry()
    cc = to_caller_callee_data(bottom_up, results, diff_mode)
    assert (Symbol(9, 9) in cc.entries) is kept
    assert ALLOC in cc.entries


def test_empty_tree_gives_copy():
    bottom_up, _ = merge_allocations(TraceData(), RESULT)
    cc = to_caller_callee_data(bottom_up, CallerCalleeResults(), False)
    assert cc.entries == {}


def histogram_data(count):
    ips = [InstructionPointer(frame=Frame(function_index=i + 1), module_index=1) for i in range(count)]
    traces = [Trace(ip_index=i + 1) for i in range(count)]
    allocations = [Allocation(trace_index=i + 1) for i in range(count)]
    return TraceData(traces=traces, instruction_pointers=ips, allocations=allocations)


def counted(size, index, allocations):
    return CountedAllocationInfo(AllocationInfo(size=size, allocation_index=index), allocations)


def test_empty_histogram():
    histogram = build_size_histogram([], histogram_data(1), RESULT)
    assert histogram.rows == []
    assert histogram.result_data is None


def test_histogram_buckets_and_labels():
    infos = [counted(12, 1, 5), counted(4, 0, 2), counted(8, 1, 1)]
    histogram = build_size_histogram(infos, histogram_data(2), RESULT)
    assert [row.size_label for row in histogram.rows] == ["0B to 8B", "9B to 16B"]
    assert [row.size for row in histogram.rows] == [8, 16]
    assert histogram.rows[1].columns[0].allocations == 5
    assert histogram.rows[1].columns[0].total_allocated == 12 * 5
    assert histogram.rows[1].columns[1].symbol == Symbol(2, 1)
    assert histogram.result_data is RESULT


def test_histogram_totals_match_columns():
    infos = [counted(4, 0, 2), counted(8, 1, 1), counted(6, 1, 7)]
    histogram = build_size_histogram(infos, histogram_data(2), RESULT)
    (row,) = histogram.rows
    symbols = row.columns[1:]
    assert row.columns[0].allocations == sum(c.allocations for c in symbols)
    assert row.columns[0].total_allocated == sum(c.total_allocated for c in symbols)
    assert row.columns[1].symbol == Symbol(2, 1)
    assert row.columns[1].allocations >= row.columns[2].allocations


def test_histogram_keeps_top_ten_symbols():
    infos = [counted(4, i, i + 1) for i in range(12)]
    histogram = build_size_histogram(infos, histogram_data(12), RESULT)
    (row,) = histogram.rows
    shown = {column.symbol for column in row.columns[1:]}
    assert len(row.columns) == 11
    assert Symbol(1, 1) not in shown
    assert Symbol(2, 1) not in shown
    assert Symbol(12, 1) in shown
    counts = [column.allocations for column in row.columns[1:]]
    assert counts == sorted(counts, reverse=True)


def test_counted_info_ordering():
    a = counted(4, 0, 9)
    b = counted(8, 0, 1)
    c = counted(8, 0, 2)
    assert sorted([c, b, a]) == [a, b, c]
    assert build_size_histogram([c], histogram_data(1), RESULT).rows[0].columns[0].allocations == 2
    with pytest.raises(IndexError):
        build_size_histogram([counted(4, 5, 1)], histogram_data(1), RESULT)