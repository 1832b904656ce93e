"""
Health and metrics endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..api_client import InventoryApiClient
from ..dependencies import get_api_client
from ..logging_config import SERVICE_NAME
from ..metrics import metrics_endpoint

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    summary="Health check",
    description="Check service health and the inventory API",
)
async def health_check(
    client: InventoryApiClient = Depends(get_api_client),
) -> Dict[str, Any]:
    """
    Report the health of the dashboard and the inventory API.

    Returns:
        Dictionary with health status information:
        {
            "status": "healthy" | "degraded",
            "service": "medinventory-ui",
            "dependencies": {
                "inventory_api": "healthy" | "unhealthy"
            }
        }
    """
    api_healthy = await client.health_check()

    return {
        "status": "healthy" if api_healthy else "degraded",
        "service": SERVICE_NAME,
        "dependencies": {
            "inventory_api": "healthy" if api_healthy else "unhealthy",
        },
    }


@router.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint."""
    return await metrics_endpoint()
