from heapsight.costs import AllocationData, ResultData, Symbol
from heapsight.topproxy import TopProxy, TopType
from heapsight.treemodel import Column, RowData, TreeData, TreeModel


def make_model(peaks, max_peak):
    rows = [RowData(AllocationData(peak=peak), Symbol(1, 1)) for peak in peaks]
    model = TreeModel()
    model.reset_data(TreeData(rows, ResultData(AllocationData(), ["f"])))
    model.set_summary(AllocationData(peak=max_peak))
    return model, rows


def test_accepts_column():
    proxy = TopProxy(TopType.LEAKED)
    assert proxy.accepts_column(Column.LOCATION)
    assert proxy.accepts_column(Column.LEAKED)
    assert not proxy.accepts_column(Column.PEAK)
    assert not proxy.accepts_column(Column.TEMPORARY)


def test_threshold_is_one_percent_of_max():
    model, _ = make_model([1000, 5, 0, -100], 1000)
    proxy = TopProxy(TopType.PEAK, model)
    assert proxy.cost_threshold == 10
    assert [proxy.accepts_row(i) for i in range(4)] == [True, False, False, True]


def test_child_rows_rejected():
    model, rows = make_model([1000], 1000)
    proxy = TopProxy(TopType.PEAK, model)
    assert proxy.accepts_row(0, rows[0]) is False
    assert proxy.accepts_row(3) is False


def test_rows_sorted_by_descending_cost():
    model, rows = make_model([100, 5, 1000, -300], 1000)
    proxy = TopProxy(TopType.PEAK, model)
    assert proxy.rows() == [rows[2], rows[3], rows[0]]


def test_threshold_updates_on_model_reset():
    model, rows = make_model([1000, 5], 1000)
    proxy = TopProxy(TopType.PEAK, model)
    assert proxy.rows() == [rows[0]]
    model.set_summary(AllocationData(peak=10))
    assert proxy.cost_threshold == 0
    assert proxy.rows() == [rows[0], rows[1]]
    model.clear_data()
    assert proxy.cost_threshold == 0
    assert proxy.rows() == []


def test_set_source_model_registers_once():
    model, _ = make_model([1000], 1000)
    proxy = TopProxy(TopType.PEAK)
    assert proxy.rows() == []
    proxy.set_source_model(model)
    proxy.set_source_model(model)
    assert model.reset_listeners.count(proxy.update_cost_threshold) == 1


def test_other_cost_kind_ignores_peak():
    model, _ = make_model([1000], 1000)
    proxy = TopProxy(TopType.ALLOCATIONS, model)
    assert proxy.accepts_row(0) is False
    assert proxy.rows() == []