"""
Upstream HTTP clients and their FastAPI dependencies.

Clients are opened once during application startup, kept on `app.state`, and
handed to routes through dependencies.
"""

from typing import Optional
from fastapi import Depends, Request
import httpx
import structlog

from .config import Settings, get_settings
from .services.api_helper import ApiHelper
from .services.monnify_service import MonnifyService

logger = structlog.get_logger(__name__)


class UpstreamClients:
    """
    Owns the outbound HTTP clients used by the relay.

    Handles client lifecycle; one instance per running application.
    """

    def __init__(self, monnify_api: ApiHelper, demo_client: httpx.AsyncClient):
        self.monnify_api = monnify_api
        self.demo_client = demo_client

    @classmethod
    def open(cls, settings: Settings) -> "UpstreamClients":
        """
        Create clients bound to the configured upstream base URLs.
        """
        logger.info(
            "opening_upstream_clients",
            monnify_api_url=settings.monnify_api_url,
            demo_api_url=settings.demo_api_url,
            timeout=settings.provider_timeout_seconds
        )

        return cls(
            monnify_api=ApiHelper(
                settings.monnify_api_url,
                timeout=settings.provider_timeout_seconds
            ),
            demo_client=httpx.AsyncClient(
                timeout=settings.provider_timeout_seconds,
                follow_redirects=True
            )
        )

    async def close(self) -> None:
        """
        Close all connection pools.
        """
        logger.info("closing_upstream_clients")
        await self.monnify_api.aclose()
        await self.demo_client.aclose()
        logger.info("upstream_clients_closed")


def _get_clients(request: Request) -> UpstreamClients:
    clients: Optional[UpstreamClients] = getattr(request.app.state, "clients", None)
    if clients is None:
        raise RuntimeError("Upstream clients not initialized. Is the lifespan running?")
    return clients


# Dependencies for route injection

def get_monnify_api(request: Request) -> ApiHelper:
    """Request client bound to the Monnify base URL."""
    return _get_clients(request).monnify_api


def get_demo_client(request: Request) -> httpx.AsyncClient:
    """Plain httpx client used by the demo endpoint."""
    return _get_clients(request).demo_client


def get_monnify_service(
    api: ApiHelper = Depends(get_monnify_api),
    settings: Settings = Depends(get_settings)
) -> MonnifyService:
    """
    Build a MonnifyService for the current request.

    Usage in route:
        @router.post("/endpoint")
        async def endpoint(monnify: MonnifyService = Depends(get_monnify_service)):
            ...
    """
    return MonnifyService(
        api=api,
        api_key=settings.monnify_api_key,
        client_secret=settings.monnify_client_secret
    )


__all__ = [
    "UpstreamClients",
    "get_monnify_api",
    "get_demo_client",
    "get_monnify_service",
]
