"""
Tree view model: expand/collapse state and the rows the console renders.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from pricewatch.core.category_tree import (
    CategoryNode, flatten_tree_for_display, search_categories
)
from pricewatch.core.selection import CheckState, SelectionState, state_of


@dataclass(frozen=True)
class TreeViewState:
    """Expanded node paths of one view."""
    expanded: frozenset = field(default_factory=frozenset)


@dataclass
class TreeRow:
    """One rendered tree line."""
    path: str
    name: str
    product_count: int
    depth: int
    has_children: bool
    expanded: bool
    check_state: CheckState
    active: bool

    def to_dict(self) -> Dict:
        return {
            "path": self.path,
            "name": self.name,
            "productCount": self.product_count,
            "depth": self.depth,
            "hasChildren": self.has_children,
            "expanded": self.expanded,
            "checkState": self.check_state.value,
            "active": self.active,
        }


def default_expanded(roots: List[CategoryNode], open_depth: int = 1) -> TreeViewState:
    """Expand every node with children above `open_depth`."""
    expanded = set()
    stack = [(node, 0) for node in roots]
    while stack:
        node, depth = stack.pop()
        if depth >= open_depth:
            continue
        if node.children:
            expanded.add(node.path)
        stack.extend((child, depth + 1) for child in node.children)
    return TreeViewState(expanded=frozenset(expanded))


def toggle_expanded(
    view: TreeViewState,
    index: Mapping[str, CategoryNode],
    path: str
) -> TreeViewState:
    """Open or close a node. Leaves and unknown paths are left alone."""
    node = index.get(path)
    if node is None or not node.children:
        return view
    if path in view.expanded:
        return TreeViewState(expanded=view.expanded - {path})
    return TreeViewState(expanded=view.expanded | {path})


def expand_all(roots: List[CategoryNode]) -> TreeViewState:
    return TreeViewState(expanded=frozenset(
        node.path for node in flatten_tree_for_display(roots) if node.children
    ))


def collapse_all() -> TreeViewState:
    return TreeViewState()


def _make_row(
    node: CategoryNode,
    depth: int,
    index: Mapping[str, CategoryNode],
    view: TreeViewState,
    state: SelectionState
) -> TreeRow:
    return TreeRow(
        path=node.path,
        name=node.name,
        product_count=node.product_count,
        depth=depth,
        has_children=bool(node.children),
        expanded=node.path in view.expanded,
        check_state=state_of(index, state.selected, node.path),
        active=node.path == state.active,
    )


def visible_rows(
    roots: List[CategoryNode],
    index: Mapping[str, CategoryNode],
    view: TreeViewState,
    state: SelectionState,
    query: str = ""
) -> List[TreeRow]:
    """
    Rows to render, in pre-order.

    Without a search query only children of expanded nodes are shown. With a
    query, every matching node is listed at its real depth and expansion is
    ignored.
    """
    depths: Dict[str, int] = {}
    rows: List[TreeRow] = []
    searching = bool(query and query.strip())

    stack = [(node, 0) for node in reversed(roots)]
    while stack:
        node, depth = stack.pop()
        depths[node.path] = depth
        if not searching:
            rows.append(_make_row(node, depth, index, view, state))
            if node.path not in view.expanded:
                continue
        stack.extend((child, depth + 1) for child in reversed(node.children))

    if searching:
        matches = search_categories(flatten_tree_for_display(roots), query)
        rows = [_make_row(node, depths[node.path], index, view, state) for node in matches]

    return rows
