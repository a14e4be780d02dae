"""
Basket schemas.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List


class BasketListResponse(BaseModel):
    """Baskets available as targets."""
    items: List[Dict[str, Any]] = []


class AddProductsRequest(BaseModel):
    """Products to add to a basket."""
    model_config = ConfigDict(populate_by_name=True)

    product_ids: List[int] = Field(..., min_length=1, alias="productIds")


class AddProductsResponse(BaseModel):
    """Result of adding products to a basket."""
    basket_id: int
    added: int
