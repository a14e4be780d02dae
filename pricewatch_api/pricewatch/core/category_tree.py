"""
Category tree utilities for materialized-path category trees.

The Catalog API delivers the tree already nested; every node carries its
materialized path (e.g. "electronics/phones"). A tree snapshot is parsed once,
indexed by path, and treated as immutable afterwards.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


@dataclass
class CategoryNode:
    """
    Represents a category in the tree structure.

    Attributes:
        path: Materialized path, globally unique
        name: Display name
        product_count: Number of products in this category
        children: Ordered child nodes
    """
    path: str
    name: str
    product_count: int = 0
    children: List["CategoryNode"] = field(default_factory=list)

    def __repr__(self):
        return f"CategoryNode(path='{self.path}', children={len(self.children)})"


def _coerce_count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return max(value, 0)


def _make_node(raw: Dict, separator: str) -> CategoryNode:
    path = str(raw["path"])
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        name = path.rsplit(separator, 1)[-1]
    return CategoryNode(
        path=path,
        name=name,
        product_count=_coerce_count(raw.get("productCount", 0)),
    )


def parse_category_tree(raw: Any, separator: str = "/") -> List[CategoryNode]:
    """
    Build CategoryNode objects from the Catalog API JSON payload.

    Args:
        raw: JSON array of nested category dicts (path, name, productCount, children)
        separator: Path separator, used to derive a missing name

    Returns:
        List of root CategoryNode objects. Entries without a path are skipped
        together with their subtree; anything that is not a list yields [].
    """
    if not isinstance(raw, list):
        return []

    roots: List[CategoryNode] = []
    # (raw dict, sibling list the parsed node is appended to)
    stack = [(item, roots) for item in reversed(raw)]

    while stack:
        item, siblings = stack.pop()
        if not isinstance(item, dict) or not item.get("path"):
            logger.warning(f"Skipping category entry without path: {str(item)[:100]}")
            continue

        node = _make_node(item, separator)
        siblings.append(node)

        children = item.get("children") or []
        if isinstance(children, list):
            for child in reversed(children):
                stack.append((child, node.children))

    return roots


def build_index(roots: List[CategoryNode]) -> Dict[str, CategoryNode]:
    """
    Build a path -> node lookup over the whole forest.

    Every node (root and non-root) is visited exactly once, in pre-order.
    On a duplicate path the first node wins.
    """
    index: Dict[str, CategoryNode] = {}
    stack = list(reversed(roots))

    while stack:
        node = stack.pop()
        if node.path in index:
            logger.warning(f"Duplicate category path in tree: {node.path}")
        else:
            index[node.path] = node
        stack.extend(reversed(node.children))

    return index


def descendants_of(index: Dict[str, CategoryNode], path: str) -> List[str]:
    """
    Return every path strictly below `path`, in pre-order.

    Unknown paths yield an empty list: the tree may not be loaded yet.
    """
    node = index.get(path)
    if node is None:
        return []

    result: List[str] = []
    stack = list(reversed(node.children))
    while stack:
        current = stack.pop()
        result.append(current.path)
        stack.extend(reversed(current.children))
    return result


def ancestors_of(path: str, separator: str = "/") -> List[str]:
    """
    Proper ancestor paths of `path`, from the root down.

    Example: "a/b/c" -> ["a", "a/b"]
    """
    parts = [p for p in path.split(separator) if p]
    return [separator.join(parts[:i]) for i in range(1, len(parts))]


def flatten_tree_for_display(roots: List[CategoryNode]) -> List[CategoryNode]:
    """
    Flatten a category tree into a depth-first ordered list.

    Args:
        roots: List of root CategoryNode objects

    Returns:
        Flat list of all CategoryNode objects in depth-first order
    """
    result: List[CategoryNode] = []
    stack = list(reversed(roots))
    while stack:
        node = stack.pop()
        result.append(node)
        stack.extend(reversed(node.children))
    return result


def search_categories(nodes: List[CategoryNode], query: str) -> List[CategoryNode]:
    """
    Search categories by name or path (case-insensitive).

    Args:
        nodes: List of CategoryNode objects to search
        query: Search query string

    Returns:
        Filtered list of CategoryNode objects matching the query
    """
    if not query or not query.strip():
        return nodes

    q = query.strip().lower()
    return [
        node for node in nodes
        if q in node.name.lower() or q in node.path.lower()
    ]


def node_to_dict(node: CategoryNode) -> Dict[str, Any]:
    """Serialize a node and its subtree to the wire format."""
    return {
        "path": node.path,
        "name": node.name,
        "productCount": node.product_count,
        "children": [node_to_dict(child) for child in node.children],
    }
