"""
Basket hand-off endpoints: add products picked in the listing to a basket.
"""

import logging
from fastapi import APIRouter, HTTPException, status

from pricewatch.deps import get_catalog_client
from pricewatch.core.catalog_client import CatalogAPIError
from pricewatch.schemas.baskets import AddProductsRequest, AddProductsResponse, BasketListResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=BasketListResponse)
async def list_baskets():
    """List baskets that can receive products."""
    client = get_catalog_client()
    try:
        return BasketListResponse(items=await client.list_baskets())
    except CatalogAPIError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Error fetching baskets: {str(e)}"
        )
    finally:
        await client.close()


@router.post("/{basket_id}/products", response_model=AddProductsResponse)
async def add_products(basket_id: int, request: AddProductsRequest):
    """Add products to a basket."""
    client = get_catalog_client()
    try:
        await client.add_products_to_basket(basket_id, request.product_ids)
        logger.info(f"Added {len(request.product_ids)} products to basket {basket_id}")
        return AddProductsResponse(basket_id=basket_id, added=len(request.product_ids))
    except CatalogAPIError as e:
        code = status.HTTP_404_NOT_FOUND if e.status_code == 404 else status.HTTP_502_BAD_GATEWAY
        raise HTTPException(
            status_code=code,
            detail=f"Error adding products to basket: {str(e)}"
        )
    finally:
        await client.close()
