"""
Monnify service for authentication and identity lookups.

Builds on ApiHelper: provider errors come back as payloads, so every field
read from a response goes through an explicit extraction helper.
"""

from typing import Any, Optional, Union
import base64
import structlog

from .api_helper import ApiHelper

logger = structlog.get_logger(__name__)

LOGIN_PATH = "/auth/login"
NIN_DETAILS_PATH = "/vas/nin-details"


class MonnifyService:
    """
    Service wrapping the Monnify endpoints used by the relay.
    """

    def __init__(self, api: ApiHelper, api_key: str, client_secret: str):
        """
        Initialize Monnify service.

        Args:
            api: Request client bound to the Monnify base URL
            api_key: Monnify API key
            client_secret: Monnify client secret
        """
        self.api = api
        self.api_key = api_key
        self.client_secret = client_secret

    def basic_credentials(self) -> str:
        """Base64 encode `api_key:client_secret` for HTTP Basic auth."""
        raw = f"{self.api_key}:{self.client_secret}"
        return base64.b64encode(raw.encode()).decode()

    async def authenticate(self) -> Any:
        """
        Exchange the API credentials for an access token.

        Returns:
            Raw login response, a provider error payload, or None
        """
        return await self.api.post(
            LOGIN_PATH,
            {},
            {"headers": {"authorization": f"Basic {self.basic_credentials()}"}}
        )

    async def get_nin_details(self, access_token: str, nin: Union[str, int]) -> Any:
        """
        Look up NIN details with a bearer token.

        Args:
            access_token: Token returned by authenticate()
            nin: National Identification Number

        Returns:
            Raw lookup response, a provider error payload, or None
        """
        logger.info("nin_lookup_started", nin_suffix=str(nin)[-4:])

        return await self.api.post(
            NIN_DETAILS_PATH,
            {"nin": nin},
            {"headers": {"authorization": f"Bearer {access_token}"}}
        )

    @staticmethod
    def extract_access_token(payload: Any) -> Optional[str]:
        """Read `responseBody.accessToken`, or None if the shape does not match."""
        token = _response_body(payload).get("accessToken")
        if isinstance(token, str) and token:
            return token
        return None

    @staticmethod
    def extract_expires_in(payload: Any) -> Optional[Union[int, float]]:
        """Read `responseBody.expiresIn`, or None if the shape does not match."""
        expires_in = _response_body(payload).get("expiresIn")
        if isinstance(expires_in, (int, float)) and not isinstance(expires_in, bool):
            return expires_in
        return None


def _response_body(payload: Any) -> dict:
    if not isinstance(payload, dict):
        return {}
    body = payload.get("responseBody")
    return body if isinstance(body, dict) else {}


__all__ = ["MonnifyService", "LOGIN_PATH", "NIN_DETAILS_PATH"]
