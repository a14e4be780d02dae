"""
View session schemas.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Any, Dict, List, Literal, Optional

from pricewatch.core.selection import ViewMode
from pricewatch.schemas.categories import TreeRow


class ProductQuerySchema(BaseModel):
    """Listing query derived from the selection."""
    categories: List[str]
    subtree: bool = True


class SelectionEventRequest(BaseModel):
    """Tree view input event."""
    type: Literal["toggle", "activate", "set_mode", "clear"]
    path: Optional[str] = None
    mode: Optional[ViewMode] = None

    @model_validator(mode="after")
    def check_arguments(self):
        if self.type in ("toggle", "activate") and self.path is None:
            raise ValueError(f"'{self.type}' event requires 'path'")
        if self.type == "toggle" and not self.path:
            raise ValueError("'toggle' event requires a non-empty 'path'")
        if self.type == "set_mode" and self.mode is None:
            raise ValueError("'set_mode' event requires 'mode'")
        return self


class ExpandRequest(BaseModel):
    """Expand/collapse one node."""
    path: str


class SessionView(BaseModel):
    """Everything the products view renders."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    mode: ViewMode
    active: str = ""
    selected: List[str] = []
    selected_count: int = Field(0, alias="selectedCount")
    stale_selected: int = Field(0, alias="staleSelected")
    tree_loaded: bool = Field(False, alias="treeLoaded")
    fetched_at: Optional[str] = Field(None, alias="fetchedAt")
    rows: List[TreeRow] = []
    query: Optional[ProductQuerySchema] = None


class ProductListResponse(BaseModel):
    """Product listing for a session."""
    query: Optional[ProductQuerySchema] = None
    items: List[Dict[str, Any]] = []
    total: int = 0
