# heapsight

Data models and aggregation routines for exploring heap allocation traces.
Given the traces, instruction pointers and allocations recorded by a heap
profiler, heapsight builds the views used to find where memory goes:

- a **bottom-up** tree of call stacks, merged by symbol, and the matching
  **top-down** tree (`heapsight.merge`);
- **caller/callee** statistics with self and inclusive costs, and a
  **size histogram** of allocation requests (`heapsight.analysis`);
- table models that present these results with sorting, filtering and
  human-readable formatting (`heapsight.treemodel`, `heapsight.treeproxy`,
  `heapsight.topproxy`, `heapsight.histogrammodel`,
  `heapsight.stacksmodel`, `heapsight.suppressionsmodel`);
- formatting helpers for times, byte sizes, percentages, symbols and
  tooltips (`heapsight.util`).

It has no runtime dependencies beyond the standard library.

## Installation

```
pip install heapsight
```

## Formatting helpers

```python
from heapsight.util import format_bytes, format_time, format_cost_relative

format_time(61_500)            # "1min01s"
format_time(4_500)             # "04.500s"
format_cost_relative(25, 200)  # "12.5"
format_bytes(2048)             # "2.0KB"
```

## Building trees

```python
from heapsight.costs import AllocationData, ResultData
from heapsight.merge import merge_allocations, to_top_down_data
from heapsight.analysis import to_caller_callee_data
from heapsight.treemodel import TreeModel

bottom_up, caller_callee = merge_allocations(trace_data, result_data, None)
top_down = to_top_down_data(bottom_up)
caller_callee = to_caller_callee_data(bottom_up, caller_callee, False)

model = TreeModel()
model.reset_data(bottom_up)
model.set_summary(result_data.total_costs)
```

Here `trace_data` is a `heapsight.merge.TraceData` holding the traces,
instruction pointers and allocations of a recording (all indices 1-based,
0 meaning "none"), and `result_data` is a `heapsight.costs.ResultData`
holding the string table and the total costs.

`merge_allocations` takes an optional callable as its third argument; it is
called with the percentage of allocations merged so far.

## Filtering and hot spots

`heapsight.treeproxy.TreeProxy` accepts rows whose function and module names
contain the filter texts, ignoring case, and orders rows by cost or by
location. `heapsight.topproxy.TopProxy` lists the top-level rows of a
`TreeModel` for one `TopType` (peak, leaked, allocations or temporary),
highest cost first, hiding anything below 1% of the maximum cost.

## Size histogram

`heapsight.analysis.build_size_histogram` groups `CountedAllocationInfo`
records into size buckets from "0B to 8B" up to "more than 1KB"; each row
holds the bucket total and the ten symbols with the most allocations.
`heapsight.histogrammodel.HistogramModel` presents the result as a table.

## What heapsight does not do

heapsight does not read recording files: the `TraceData`, `ResultData` and
allocation size records have to be filled in by the caller. It has no
command-line program and no graphical interface; its models answer
`data` / `header_data` queries and call plain Python listeners on reset,
for a front end to build on.

## Development

Install the test extra and run the test suite:

```
pip install -e .[test]
pytest
```