"""HTTP client for the Genesys Cloud platform API."""

import threading
import time
from typing import Any, Callable, Dict, Optional

import httpx

from genesyscloud_provider._version import __version__
from genesyscloud_provider.config.schemas.provider_schema import ProviderConfig
from genesyscloud_provider.infrastructure.logging.logger import get_logger
from genesyscloud_provider.providers.genesyscloud.exceptions import (
    APIError,
    AuthenticationError,
    RateLimitError,
    TransportError,
    convert_http_error,
)

logger = get_logger(__name__)

# Refresh the access token this many seconds before it expires
TOKEN_EXPIRY_MARGIN = 60.0

RETRYABLE_STATUS_CODES = (429, 502, 503, 504)


class GenesysCloudClient:
    """
    Genesys Cloud API client authenticated with OAuth client credentials.

    Requests are retried with exponential backoff when the API throttles the
    client or is temporarily unavailable; a Retry-After header takes
    precedence over the computed delay. Other error responses are raised as
    APIError subclasses.
    """

    def __init__(self, config: ProviderConfig,
                 transport: Optional[httpx.BaseTransport] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the client.

        Args:
            config: Provider connection settings
            transport: Optional httpx transport, used by tests
            sleep: Sleep function used between transport retries
        """
        self.config = config
        self.max_retries = config.max_retries
        self.base_delay = config.retry_base_delay
        self._sleep = sleep
        self._lock = threading.Lock()
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"genesyscloud-resource-provider/{__version__}",
        }
        self._client = httpx.Client(
            base_url=config.base_url,
            headers=headers,
            timeout=config.request_timeout,
            transport=transport,
        )
        self._auth_client = httpx.Client(
            base_url=config.login_url,
            timeout=config.request_timeout,
            transport=transport,
        )

    def authenticate(self) -> str:
        """
        Request a new access token.

        Returns:
            The access token

        Raises:
            AuthenticationError: If credentials are missing or rejected
        """
        if not self.config.has_credentials():
            raise AuthenticationError("OAuth client ID and secret must be configured")

        try:
            response = self._auth_client.post(
                "/oauth/token",
                data={"grant_type": "client_credentials"},
                auth=(self.config.oauthclient_id, self.config.oauthclient_secret.get_secret_value()),
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to reach login service: {str(e)}")

        if response.status_code >= 400:
            error = convert_http_error(response)
            raise AuthenticationError(f"Failed to authorize client: {error.message}",
                                      status_code=response.status_code, code=error.code)

        payload = response.json()
        with self._lock:
            self._token = payload["access_token"]
            self._token_expires_at = time.monotonic() + float(payload.get("expires_in", 86400))
        logger.info("Authorized Genesys Cloud client for region %s", self.config.aws_region)
        return self._token

    def _access_token(self) -> str:
        with self._lock:
            token = self._token
            valid = token and time.monotonic() < self._token_expires_at - TOKEN_EXPIRY_MARGIN
        return token if valid else self.authenticate()

    def request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                json_data: Optional[Any] = None) -> Any:
        """
        Make an API request.

        Args:
            method: HTTP method
            path: Path relative to the API base URL
            params: Query parameters, None values are dropped
            json_data: JSON request body

        Returns:
            Decoded JSON response, None for an empty body

        Raises:
            APIError: If the request fails after retries
        """
        if params:
            params = {key: value for key, value in params.items() if value is not None}
        return self._retry_with_backoff(self._send, method, path, params, json_data)

    def _send(self, method: str, path: str, params: Optional[Dict[str, Any]],
              json_data: Optional[Any]) -> Any:
        try:
            response = self._client.request(
                method,
                path,
                params=params,
                json=json_data,
                headers={"Authorization": f"Bearer {self._access_token()}"},
            )
            if response.status_code == 401:
                # Token revoked or expired early; authorize once more
                logger.debug("Access token rejected, re-authorizing")
                response = self._client.request(
                    method,
                    path,
                    params=params,
                    json=json_data,
                    headers={"Authorization": f"Bearer {self.authenticate()}"},
                )
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {str(e)}")

        if self.config.sdk_debug:
            logger.info("%s %s -> %s", method, path, response.status_code,
                        correlation_id=response.headers.get("ININ-Correlation-Id"))

        if response.status_code >= 400:
            raise convert_http_error(response)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _retry_with_backoff(self, operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Execute an operation with exponential backoff retry."""
        attempt = 0
        while True:
            try:
                return operation(*args, **kwargs)
            except APIError as e:
                if attempt >= self.max_retries or not self._should_retry(e):
                    raise

                delay = (2 ** attempt) * self.base_delay
                if isinstance(e, RateLimitError) and e.retry_after is not None:
                    delay = e.retry_after
                attempt += 1
                logger.warning(f"Attempt {attempt} failed, retrying in {delay} seconds: {str(e)}")
                self._sleep(delay)

    def _should_retry(self, error: APIError) -> bool:
        """Determine if an error should trigger a retry."""
        return isinstance(error, TransportError) or error.status_code in RETRYABLE_STATUS_CODES

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, data: Optional[Any] = None) -> Any:
        return self.request("POST", path, json_data=data)

    def put(self, path: str, data: Optional[Any] = None) -> Any:
        return self.request("PUT", path, json_data=data)

    def patch(self, path: str, data: Optional[Any] = None) -> Any:
        return self.request("PATCH", path, json_data=data)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def close(self) -> None:
        self._client.close()
        self._auth_client.close()

    def __enter__(self) -> "GenesysCloudClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
