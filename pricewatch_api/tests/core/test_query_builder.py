from pricewatch.core.query_builder import ProductQuery, build_query, to_request_params
from pricewatch.core.selection import SelectionState, ViewMode


def test_active_mode_ignores_selection():
    state = SelectionState(selected=frozenset({"x", "y"}), active="a/b", mode=ViewMode.ACTIVE)
    assert build_query(state) == ProductQuery(categories=("a/b",), subtree=True)


def test_active_mode_without_active_path_is_no_query():
    state = SelectionState(selected=frozenset({"x"}), mode=ViewMode.ACTIVE)
    assert build_query(state) is None


def test_selected_mode_uses_stable_order():
    state = SelectionState(selected=frozenset({"c", "a", "b/x"}), active="zzz", mode=ViewMode.SELECTED)
    assert build_query(state).categories == ("a", "b/x", "c")
    assert build_query(state) == build_query(state)


def test_selected_mode_with_empty_selection_is_no_query():
    assert build_query(SelectionState(active="a", mode=ViewMode.SELECTED)) is None


def test_request_params_repeat_category():
    query = ProductQuery(categories=("a", "b"))
    assert to_request_params(query) == [("category", "a"), ("category", "b"), ("mode", "subtree")]
    assert to_request_params(query, limit=5000, offset=0)[-2:] == [("limit", "5000"), ("offset", "0")]


def test_request_params_without_subtree():
    assert to_request_params(ProductQuery(categories=("a",), subtree=False)) == [("category", "a")]
