"""
Products API endpoints.
"""

import logging
from fastapi import APIRouter, Query, HTTPException, status
from typing import Optional

from pricewatch.deps import get_session_service
from pricewatch.core.catalog_client import CatalogAPIError
from pricewatch.core.listing import ListingSuperseded
from pricewatch.core.sessions import SessionNotFound
from pricewatch.schemas.sessions import ProductListResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ProductListResponse)
async def list_products(
    session_id: str,
    limit: Optional[int] = Query(None, ge=1),
    offset: Optional[int] = Query(None, ge=0)
):
    """
    List products for the session's current query.

    With no category to ask for, returns an empty listing without calling
    the Catalog API.
    """
    service = await get_session_service()

    try:
        return await service.products(session_id, limit=limit, offset=offset)
    except SessionNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session '{session_id}' not found"
        )
    except ListingSuperseded:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Listing superseded by a newer selection"
        )
    except CatalogAPIError as e:
        logger.error(f"Error fetching products for session {session_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Error fetching products: {str(e)}"
        )
