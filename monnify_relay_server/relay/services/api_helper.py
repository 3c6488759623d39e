"""
Generic request client for upstream JSON APIs.

Wraps an httpx AsyncClient bound to one base URL. Every call makes exactly
one network attempt and never raises on transport faults: failures come back
as the provider's error payload (or None) through the same return channel as
a successful body.
"""

from typing import Any, Mapping, Optional
from uuid import uuid4
import httpx
import structlog

from ..models import ApiResult

logger = structlog.get_logger(__name__)

# Methods that never carry a request body
BODYLESS_METHODS = frozenset({"GET", "DELETE"})


class ApiHelper:
    """
    Verb-oriented wrapper around an httpx AsyncClient.

    Holds no state between calls besides the bound base URL, so one instance
    can be shared by concurrent requests.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the client.

        Args:
            base_url: Base address relative paths are resolved against
            timeout: Default timeout in seconds; None disables timeouts
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            follow_redirects=True,
            transport=transport
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> "ApiHelper":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def send(
        self,
        method: str,
        url: str,
        data: Any = None,
        config: Optional[Mapping[str, Any]] = None
    ) -> ApiResult:
        """
        Perform one HTTP call and return a tagged result.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            url: Path relative to the base URL
            data: JSON body; ignored for GET and DELETE
            config: Extra httpx request options (headers, params, timeout...),
                merged over the defaults

        Returns:
            ApiResult tagged success, provider_error or empty
        """
        method = method.upper()
        options: dict = {"method": method, "url": url}
        if method not in BODYLESS_METHODS and data is not None:
            options["json"] = data
        if config:
            options.update(config)

        log = logger.bind(call_id=uuid4().hex[:12], method=method, url=url)

        try:
            response = await self._client.request(**options)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            payload = _error_payload(e.response)
            log.warning(
                "provider_request_failed",
                status_code=e.response.status_code,
                error=payload
            )
            if payload is None:
                return ApiResult.empty(e.response.status_code)
            return ApiResult.provider_error(payload, e.response.status_code)
        except httpx.RequestError as e:
            log.warning(
                "provider_request_failed",
                error_type=type(e).__name__,
                error=str(e)
            )
            return ApiResult.empty()

        try:
            body = response.json() if response.content else None
        except ValueError as e:
            log.warning(
                "provider_response_undecodable",
                status_code=response.status_code,
                error=str(e)
            )
            return ApiResult.empty(response.status_code)

        log.debug("provider_request_completed", status_code=response.status_code)
        return ApiResult.success(body, response.status_code)

    async def request(
        self,
        method: str,
        url: str,
        data: Any = None,
        config: Optional[Mapping[str, Any]] = None
    ) -> Any:
        """
        Perform one HTTP call and return the decoded body.

        On failure returns the provider's error payload, or None when no
        payload was received. Callers inspect the value to tell them apart.
        """
        result = await self.send(method, url, data, config)
        return result.data

    async def get(self, url: str, config: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("GET", url, None, config)

    async def post(
        self,
        url: str,
        data: Any = None,
        config: Optional[Mapping[str, Any]] = None
    ) -> Any:
        return await self.request("POST", url, data, config)

    async def put(
        self,
        url: str,
        data: Any = None,
        config: Optional[Mapping[str, Any]] = None
    ) -> Any:
        return await self.request("PUT", url, data, config)

    async def patch(
        self,
        url: str,
        data: Any = None,
        config: Optional[Mapping[str, Any]] = None
    ) -> Any:
        return await self.request("PATCH", url, data, config)

    async def delete(self, url: str, config: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("DELETE", url, None, config)


def _error_payload(response: httpx.Response) -> Any:
    """Best-effort decode of an error response body."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


__all__ = ["ApiHelper", "BODYLESS_METHODS"]
