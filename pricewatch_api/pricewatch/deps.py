"""
Dependency wiring for FastAPI.
"""

from typing import Optional
import httpx
import redis.asyncio as aioredis

from pricewatch.config import get_settings
from pricewatch.core.catalog_client import CatalogClient
from pricewatch.core.session_store import SelectionSessionStore
from pricewatch.core.sessions import ConsoleSessionService, SessionRegistry


_redis_client: Optional[aioredis.Redis] = None
_registry: Optional[SessionRegistry] = None
# Overridden in tests with httpx.MockTransport
_catalog_transport: Optional[httpx.AsyncBaseTransport] = None


async def get_redis() -> aioredis.Redis:
    """Get Redis client (singleton) with lazy connection."""
    global _redis_client
    if _redis_client is None:
        settings = get_settings()
        _redis_client = aioredis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=1.0,
            socket_timeout=3.0,
            retry_on_timeout=True,
            health_check_interval=30
        )
    return _redis_client


async def close_redis():
    """Close Redis connection."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def get_registry() -> SessionRegistry:
    global _registry
    if _registry is None:
        _registry = SessionRegistry()
    return _registry


def get_catalog_client() -> CatalogClient:
    """Create a CatalogClient from settings. Callers close it."""
    settings = get_settings()
    return CatalogClient(
        base_url=settings.catalog_api_url,
        token=settings.catalog_api_token,
        timeout=settings.catalog_timeout,
        max_retries=settings.catalog_max_retries,
        separator=settings.category_path_separator,
        transport=_catalog_transport
    )


async def get_session_service() -> ConsoleSessionService:
    settings = get_settings()
    redis = await get_redis()
    return ConsoleSessionService(
        store=SelectionSessionStore(redis, ttl=settings.session_ttl),
        registry=get_registry(),
        client_factory=get_catalog_client,
        open_depth=settings.default_open_depth,
        listing_limit=settings.listing_limit
    )
