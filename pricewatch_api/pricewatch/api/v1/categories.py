"""
Categories API endpoints.
"""

from fastapi import APIRouter, Query
from typing import List

from pricewatch.deps import get_catalog_client
from pricewatch.core.category_tree import (
    flatten_tree_for_display, node_to_dict, search_categories
)
from pricewatch.schemas.categories import CategoryNode as CategoryNodeSchema

router = APIRouter()


@router.get("/tree", response_model=List[CategoryNodeSchema])
async def get_category_tree():
    """
    Get the category tree from the Catalog API.

    An unavailable tree is returned as an empty list.
    """
    client = get_catalog_client()
    try:
        roots = await client.fetch_category_tree()
    finally:
        await client.close()
    return [node_to_dict(root) for root in roots]


@router.get("/search", response_model=List[CategoryNodeSchema])
async def search_category_tree(q: str = Query(..., min_length=1)):
    """Search categories by name or path. Matches are returned without children."""
    client = get_catalog_client()
    try:
        roots = await client.fetch_category_tree()
    finally:
        await client.close()

    matches = search_categories(flatten_tree_for_display(roots), q)
    return [
        {"path": n.path, "name": n.name, "productCount": n.product_count, "children": []}
        for n in matches
    ]
