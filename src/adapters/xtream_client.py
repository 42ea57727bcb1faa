"""Xtream-Codes provider API client."""

from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from src.models.kind import CATALOG_ACTIONS

logger = structlog.get_logger(__name__)


class XtreamError(Exception):
    """Base error for provider API calls."""

    def __init__(self, message: str, url: str | None = None) -> None:
        self.url = url
        super().__init__(f"{message} (url={url})" if url else message)


class CredentialError(XtreamError):
    """Credential endpoint failed or returned incomplete credentials."""


class FetchError(XtreamError):
    """Catalog listing call failed or returned an unexpected body."""


@dataclass(frozen=True)
class ProviderCredentials:
    """Transient credentials issued by a provider."""

    username: str
    password: str = field(repr=False)
    dns: str | None = None


class XtreamClient:
    """Client for provider credential and catalog endpoints.

    Stateless: credentials are never cached, every job resolves them again.
    No retries at this layer.
    """

    def __init__(
        self,
        credentials_timeout: float = 15.0,
        catalog_timeout: float = 20.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize Xtream client.

        Args:
            credentials_timeout: Timeout for the credential call in seconds.
            catalog_timeout: Timeout for catalog listing calls in seconds.
            transport: Optional httpx transport (tests).
        """
        self._credentials_timeout = credentials_timeout
        self._catalog_timeout = catalog_timeout
        self._client = httpx.Client(
            transport=transport,
            headers={"User-Agent": "catalog-sync/1.0"},
            follow_redirects=True,
        )

    def resolve_credentials(self, api_endpoint: str) -> ProviderCredentials:
        """Obtain credentials from the provider's credential endpoint.

        Args:
            api_endpoint: Credential-issuing URL (POST, empty body).

        Returns:
            Username, password and optional dns.

        Raises:
            CredentialError: On network error, timeout, non-2xx, or a response
                without username and password.
        """
        try:
            response = self._client.post(api_endpoint, timeout=self._credentials_timeout)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise CredentialError("Credential request timed out", api_endpoint) from e
        except httpx.HTTPStatusError as e:
            raise CredentialError(
                f"Credential request failed with status {e.response.status_code}",
                api_endpoint,
            ) from e
        except httpx.HTTPError as e:
            raise CredentialError(f"Credential request failed: {e}", api_endpoint) from e
        except ValueError as e:
            raise CredentialError("Credential response is not JSON", api_endpoint) from e

        if not isinstance(data, dict):
            raise CredentialError("Credential response is not an object", api_endpoint)

        username = data.get("username")
        password = data.get("password")
        missing = [
            name
            for name, value in (("username", username), ("password", password))
            if not value
        ]
        if missing:
            raise CredentialError(
                f"Credential response missing: {', '.join(missing)}", api_endpoint
            )

        return ProviderCredentials(
            username=str(username),
            password=str(password),
            dns=data.get("dns") or None,
        )

    def fetch_catalog(
        self, dns: str, credentials: ProviderCredentials, action: str
    ) -> list[Any]:
        """Fetch one catalog listing.

        Args:
            dns: Provider content API base URL.
            credentials: Resolved provider credentials.
            action: Provider action name (get_live_categories, get_series, ...).

        Returns:
            Raw records as returned by the provider.

        Raises:
            ValueError: If the action is not a known catalog action.
            FetchError: On network error, timeout, non-2xx, or a body that is
                not a JSON array.
        """
        if action not in CATALOG_ACTIONS:
            raise ValueError(f"Unknown catalog action: {action}")

        # Query string carries credentials, log the bare endpoint only
        url = f"{dns.rstrip('/')}/player_api.php"
        params = {
            "username": credentials.username,
            "password": credentials.password,
            "action": action,
        }

        try:
            response = self._client.get(url, params=params, timeout=self._catalog_timeout)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise FetchError(f"{action} timed out", url) from e
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"{action} failed with status {e.response.status_code}", url
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(f"{action} failed: {type(e).__name__}", url) from e
        except ValueError as e:
            raise FetchError(f"{action} returned invalid JSON", url) from e

        if not isinstance(data, list):
            raise FetchError(
                f"{action} returned {type(data).__name__}, expected array", url
            )

        logger.debug("catalog_fetched", action=action, url=url, count=len(data))
        return data

    def close(self) -> None:
        """Close the HTTP connection pool."""
        self._client.close()
