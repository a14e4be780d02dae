"""
Main API router for v1.
"""

from fastapi import APIRouter
from pricewatch.api.v1 import baskets, categories, products, sessions

router = APIRouter()

router.include_router(categories.router, prefix="/categories", tags=["categories"])
router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
router.include_router(products.router, prefix="/sessions/{session_id}/products", tags=["products"])
router.include_router(baskets.router, prefix="/baskets", tags=["baskets"])
