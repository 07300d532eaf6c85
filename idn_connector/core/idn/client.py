"""Low-level HTTP client for the IdentityNow API.

Handles authentication, token management, and HTTP operations.
"""
from __future__ import annotations
import logging
from typing import Optional, Dict, Any
from datetime import datetime, timedelta

import jwt
import requests

from .exceptions import IDNAPIError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10
TOKEN_REFRESH_LEEWAY = timedelta(seconds=10)
CONNECTION_CHECK_PATH = "/cc/api/org/get"


class IDNClient:
    """HTTP client for the IdentityNow API with automatic token management.

    Features:
    - OAuth2 client credentials, refreshed shortly before the token expires
    - Centralized error handling
    - Connectivity connectivity check that reports the raw status instead of raising

    Usage:
        client = IDNClient("https://acme.api.identitynow.com", "client-id", "secret")
        response = client.get("/v2/workgroups")
    """

    def __init__(
        self,
        base_url: str,
        client_id: str,
        client_secret: str,
        timeout: float = REQUEST_TIMEOUT,
    ):
        """Initialize IdentityNow client.

        Args:
            base_url: Tenant API base URL
            client_id: Personal access token / API client ID
            client_secret: Client secret
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client_id = client_id
        self._client_secret = client_secret
        self._token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None

    def authenticate(self) -> str:
        """Fetch a fresh access token using the client credentials flow.

        Returns:
            Access token
        """
        url = f"{self.base_url}/oauth/token"
        data = {
            "grant_type": "client_credentials",
            "client_id": self._client_id,
            "client_secret": self._client_secret,
        }
        resp = requests.post(url, data=data, timeout=self.timeout)
        if resp.status_code != 200:
            raise IDNAPIError(resp.status_code, resp.text, url)
        payload = resp.json()
        self._token = payload["access_token"]
        self._token_expires_at = self._expiry_of(self._token, payload.get("expires_in"))
        logger.debug("Obtained IdentityNow token (expires_at=%s)", self._token_expires_at.isoformat())
        return self._token

    @staticmethod
    def _expiry_of(token: str, expires_in: Any = None) -> datetime:
        """Read the token's exp claim, falling back to expires_in (then 60 seconds)."""
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
            exp = claims.get("exp")
            if exp:
                return datetime.fromtimestamp(int(exp))
        except jwt.InvalidTokenError:
            pass
        seconds = int(expires_in) if expires_in else 60
        return datetime.now() + timedelta(seconds=seconds)

    def _ensure_authenticated(self) -> None:
        """Ensure we have a valid token, refreshing if necessary."""
        if not self._token or not self._token_expires_at:
            self.authenticate()
            return
        if datetime.now() >= self._token_expires_at - TOKEN_REFRESH_LEEWAY:
            self.authenticate()

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        self._ensure_authenticated()
        headers = dict(extra or {})
        headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def get(self, path: str, params: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute GET request with automatic authentication.

        Args:
            path: API endpoint path (e.g., "/v2/workgroups")
            params: Query parameters
            **kwargs: Additional arguments for requests.get

        Returns:
            Response object

        Raises:
            IDNAPIError: On HTTP error
        """
        headers = self._headers(kwargs.pop("headers", None))
        resp = requests.get(f"{self.base_url}{path}", params=params, headers=headers, timeout=self.timeout, **kwargs)
        self._handle_error(resp)
        return resp

    def post(self, path: str, json: Optional[Any] = None, data: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute POST request with automatic authentication.

        Args:
            path: API endpoint path
            json: JSON payload
            data: Form data payload
            **kwargs: Additional arguments for requests.post

        Returns:
            Response object

        Raises:
            IDNAPIError: On HTTP error
        """
        headers = self._headers(kwargs.pop("headers", None))
        resp = requests.post(
            f"{self.base_url}{path}", json=json, data=data, headers=headers, timeout=self.timeout, **kwargs
        )
        self._handle_error(resp)
        return resp

    def test_connection(self) -> requests.Response:
        """Check connectivity to the tenant. The caller decides what a non-200 status means."""
        headers = self._headers()
        return requests.get(f"{self.base_url}{CONNECTION_CHECK_PATH}", headers=headers, timeout=self.timeout)

    def _handle_error(self, resp: requests.Response) -> None:
        """Centralized error handling for HTTP responses.

        Raises:
            IDNAPIError: If response status indicates error
        """
        if resp.status_code >= 400:
            raise IDNAPIError(resp.status_code, resp.text, resp.url)
