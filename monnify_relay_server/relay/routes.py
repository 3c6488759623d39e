"""
API routes for the Monnify Relay Server.

Defines all API endpoints with request/response handling.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any
from datetime import datetime
from pydantic import ValidationError
import httpx
import json
import structlog

from . import __version__
from .clients import get_demo_client, get_monnify_service
from .config import Settings, get_settings
from .models import (
    DemoApiResponse,
    ErrorResponse,
    HealthResponse,
    MessageResponse,
    NinDetailsRequest,
    NinDetailsResponse,
)
from .services.monnify_service import MonnifyService

logger = structlog.get_logger(__name__)

# Create router
router = APIRouter()


FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


# ============================================================================
# Helper Functions
# ============================================================================

async def get_nin_details_request(request: Request) -> NinDetailsRequest:
    """
    Read the optional NIN details body from JSON or form data.

    An absent body is treated as an empty object.

    Raises:
        RequestValidationError for malformed JSON or an invalid NIN
    """
    content_type = request.headers.get("content-type", "")
    raw: Any

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        raw = dict(form)
    else:
        body = await request.body()
        if not body:
            raw = {}
        else:
            try:
                raw = json.loads(body)
            except ValueError as e:
                raise RequestValidationError(
                    [{"type": "json_invalid", "loc": ("body",), "msg": f"JSON decode error: {e}"}]
                )

    try:
        return NinDetailsRequest.model_validate(raw)
    except ValidationError as e:
        raise RequestValidationError(
            [{**error, "loc": ("body", *error["loc"])} for error in e.errors()],
            body=raw
        )


NIN_DETAILS_BODY_SCHEMA = NinDetailsRequest.model_json_schema()


# ============================================================================
# NIN Details Endpoint
# ============================================================================

@router.post(
    "/nin-details",
    response_model=NinDetailsResponse,
    responses={
        200: {"description": "Successfully authenticated and NIN details retrieved"},
        401: {
            "description": "Unauthorized, invalid API key or client secret",
            "model": MessageResponse
        },
        400: {"description": "Malformed body or invalid NIN"},
        500: {
            "description": "Server error during authentication process",
            "model": ErrorResponse
        }
    },
    openapi_extra={
        "requestBody": {
            "required": False,
            "content": {
                "application/json": {"schema": NIN_DETAILS_BODY_SCHEMA},
                "application/x-www-form-urlencoded": {"schema": NIN_DETAILS_BODY_SCHEMA}
            }
        }
    },
    tags=["Authentication"],
    summary="Authenticate and retrieve NIN with Monnify API",
    description=(
        "Generates an authentication token then retrieves NIN details from the "
        "Monnify API using the API Key and Client Secret."
    )
)
async def nin_details(
    payload: NinDetailsRequest = Depends(get_nin_details_request),
    monnify: MonnifyService = Depends(get_monnify_service)
):
    """
    Authenticate with Monnify, then optionally look up a NIN.

    Args:
        payload: Body carrying the NIN to look up (JSON or form)
        monnify: Monnify service

    Returns:
        Access token, its lifetime, and the NIN lookup result (null if no NIN)
    """
    auth_response = await monnify.authenticate()
    access_token = monnify.extract_access_token(auth_response)

    if not access_token:
        logger.warning("monnify_authentication_failed", response=auth_response)
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"message": "Authentication failed, no access token received."}
        )

    nin = payload.nin
    nin_details_result = None
    if nin:
        nin_details_result = await monnify.get_nin_details(access_token, nin)

    logger.info("nin_details_completed", nin_requested=bool(nin))

    return NinDetailsResponse(
        accessToken=access_token,
        expiresIn=monnify.extract_expires_in(auth_response),
        ninDetails=nin_details_result
    )


# ============================================================================
# Demo External API Endpoint
# ============================================================================

@router.get(
    "/api",
    response_model=DemoApiResponse,
    responses={
        200: {"description": "Successful"},
        500: {"description": "External API call failed"}
    },
    tags=["Default"],
    summary="Call a demo external API (httpbin.org)",
    description="Returns an object containing demo content"
)
async def demo_api(
    client: httpx.AsyncClient = Depends(get_demo_client),
    settings: Settings = Depends(get_settings)
):
    try:
        result = await client.get(settings.demo_api_url)
        result.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(
            "demo_api_call_failed",
            url=settings.demo_api_url,
            error=str(e)
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to call external API"}
        )

    return DemoApiResponse(
        message="Demo API called (httpbin.org)",
        data=result.status_code
    )


# ============================================================================
# System Endpoints
# ============================================================================

@router.get(
    "/",
    response_model=MessageResponse,
    tags=["Default"],
    summary="API liveness check",
    description="Returns a message confirming the API is live"
)
async def root() -> MessageResponse:
    return MessageResponse(message="API is Live!")


@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["System"],
    summary="Health check",
    description="Check if the server is running and healthy"
)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns server status and version information.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow(),
        version=__version__
    )


# Export router
__all__ = ["router"]
