"""
Category schemas.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List


class CategoryNode(BaseModel):
    """Category node in tree structure."""
    model_config = ConfigDict(populate_by_name=True)

    path: str
    name: str
    product_count: int = Field(0, ge=0, alias="productCount")
    children: List["CategoryNode"] = []


class TreeRow(BaseModel):
    """Rendered tree line."""
    model_config = ConfigDict(populate_by_name=True)

    path: str
    name: str
    product_count: int = Field(0, alias="productCount")
    depth: int
    has_children: bool = Field(alias="hasChildren")
    expanded: bool
    check_state: str = Field(alias="checkState")
    active: bool
