"""
Product listing query derived from a SelectionState.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from pricewatch.core.selection import SelectionState, ViewMode


@dataclass(frozen=True)
class ProductQuery:
    """
    Canonical product-listing request.

    Attributes:
        categories: Category paths, stable order
        subtree: Each path also covers its whole subtree server-side
    """
    categories: Tuple[str, ...]
    subtree: bool = True


def build_query(state: SelectionState) -> Optional[ProductQuery]:
    """
    Build the listing query for the current mode.

    Returns None when there is no category to ask for: the listing shows
    zero rows without a round-trip.
    """
    if state.mode == ViewMode.ACTIVE:
        categories = [state.active] if state.active else []
    else:
        categories = sorted(state.selected)

    if not categories:
        return None
    return ProductQuery(categories=tuple(categories), subtree=True)


def to_request_params(
    query: ProductQuery,
    limit: Optional[int] = None,
    offset: Optional[int] = None
) -> List[Tuple[str, str]]:
    """
    Query parameters for GET /api/v1/products.

    One repeated `category` parameter per path, `mode=subtree` when the
    query asks for subtree expansion.
    """
    params = [("category", path) for path in query.categories]
    if query.subtree:
        params.append(("mode", "subtree"))
    if limit is not None:
        params.append(("limit", str(limit)))
    if offset is not None:
        params.append(("offset", str(offset)))
    return params
