"""
Pydantic models for the Monnify Relay Server.

Defines the outcome of provider calls and the API request/response schemas.
"""

from pydantic import BaseModel, Field
from typing import Any, Literal, Optional, Union
from datetime import datetime


# ============================================================================
# Provider Call Outcome
# ============================================================================

ResultKind = Literal["success", "provider_error", "empty"]


class ApiResult(BaseModel):
    """
    Outcome of a single provider call.

    `data` holds the decoded body on success, the provider's error payload on
    `provider_error`, and None when nothing usable came back.
    """
    kind: ResultKind = Field(..., description="success, provider_error or empty")
    data: Any = Field(None, description="Decoded response body or provider error payload")
    status_code: Optional[int] = Field(None, description="HTTP status, None if no response arrived")

    @property
    def ok(self) -> bool:
        return self.kind == "success"

    @classmethod
    def success(cls, data: Any, status_code: int) -> "ApiResult":
        return cls(kind="success", data=data, status_code=status_code)

    @classmethod
    def provider_error(cls, data: Any, status_code: int) -> "ApiResult":
        return cls(kind="provider_error", data=data, status_code=status_code)

    @classmethod
    def empty(cls, status_code: Optional[int] = None) -> "ApiResult":
        return cls(kind="empty", data=None, status_code=status_code)


# ============================================================================
# Request Models (API Input)
# ============================================================================

class NinDetailsRequest(BaseModel):
    """Optional request body for the NIN details endpoint."""
    nin: Optional[Union[str, int]] = Field(None, description="The NIN to retrieve details for")

    class Config:
        json_schema_extra = {
            "example": {
                "nin": "12345678901"
            }
        }


# ============================================================================
# Response Models (API Output)
# ============================================================================

class NinDetailsResponse(BaseModel):
    """Response for the NIN details endpoint."""
    accessToken: str = Field(..., description="The access token provided by Monnify")
    expiresIn: Optional[Union[int, float]] = Field(None, description="Token expiration time in seconds")
    ninDetails: Any = Field(None, description="NIN details retrieved using the access token")

    class Config:
        json_schema_extra = {
            "example": {
                "accessToken": "eyJhbGciOiJIUzI1NiJ9.eyJzdWIiOiJtb25uaWZ5In0.sig",
                "expiresIn": 3599,
                "ninDetails": {
                    "requestSuccessful": True,
                    "responseMessage": "success",
                    "responseCode": "0",
                    "responseBody": {
                        "nin": "12345678901",
                        "lastName": "DOE",
                        "firstName": "JANE"
                    }
                }
            }
        }


class MessageResponse(BaseModel):
    """Plain message response."""
    message: str = Field(..., description="Human-readable message")


class DemoApiResponse(BaseModel):
    """Response for the demo external API endpoint."""
    message: str = Field(..., description="Description of the call made")
    data: int = Field(..., description="HTTP status returned by the external API")

    class Config:
        json_schema_extra = {
            "example": {
                "message": "Demo API called (httpbin.org)",
                "data": 200
            }
        }


class HealthResponse(BaseModel):
    """Response for health check endpoint."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Current server time")
    version: str = Field(default="1.0.0", description="API version")

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2025-11-15T10:00:00Z",
                "version": "1.0.0"
            }
        }


class ErrorResponse(BaseModel):
    """Standard error response format."""
    success: bool = Field(default=False, description="Always false for errors")
    status: Optional[int] = Field(None, description="HTTP status code")
    message: str = Field(..., description="Human-readable error message")

    class Config:
        json_schema_extra = {
            "example": {
                "success": False,
                "status": 500,
                "message": "Something went wrong"
            }
        }


__all__ = [
    "ApiResult",
    "ResultKind",
    "NinDetailsRequest",
    "NinDetailsResponse",
    "MessageResponse",
    "DemoApiResponse",
    "HealthResponse",
    "ErrorResponse",
]
