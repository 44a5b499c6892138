"""OpenID Connect discovery document fetching and caching"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx
from pydantic import ValidationError

from .errors import DiscoveryFailed, OidcClientError, OidcRequestError
from .models import OidcConfigResponse
from .requester import Requester


logger = logging.getLogger(__name__)

DEFAULT_DISCOVERY_PATH = "/.well-known/openid-configuration"

ConfigFetcher = Callable[[str, Requester], Awaitable[OidcConfigResponse]]


def get_discovery_endpoint(endpoint: str, path: str = DEFAULT_DISCOVERY_PATH) -> str:
    """Join the issuer endpoint and the discovery document path"""
    return f"{endpoint.rstrip('/')}/{path.lstrip('/')}"


async def fetch_oidc_config(discovery_url: str, requester: Requester) -> OidcConfigResponse:
    """Fetch and parse the discovery document

    Args:
        discovery_url: Absolute URL of the discovery document
        requester: HTTP requester

    Returns:
        Parsed OidcConfigResponse

    Raises:
        DiscoveryFailed: On network, HTTP status, JSON or shape errors
    """
    try:
        payload = await requester.get_json(discovery_url)
    except OidcRequestError as e:
        raise DiscoveryFailed(
            f"Failed to fetch discovery document from {discovery_url}",
            details={"cause": e.message, "status_code": e.status_code},
        ) from e

    try:
        config = OidcConfigResponse.model_validate(payload)
    except ValidationError as e:
        raise DiscoveryFailed(
            f"Discovery document at {discovery_url} is missing required endpoints",
            details={"errors": e.errors(include_url=False)},
        ) from e

    logger.info(f"Fetched discovery document from {discovery_url}")
    return config


class OidcConfigCache:
    """Lazily fetches the discovery document once per instance

    Concurrent callers that arrive while the first fetch is in flight await
    the same task. A failed fetch leaves the cache empty so the next call
    retries.
    """

    def __init__(
        self,
        discovery_url: str,
        requester: Requester,
        fetcher: ConfigFetcher = fetch_oidc_config,
    ):
        self.discovery_url = discovery_url
        self.requester = requester
        self._fetcher = fetcher
        self._config: Optional[OidcConfigResponse] = None
        self._pending: Optional["asyncio.Task[OidcConfigResponse]"] = None

    @property
    def cached(self) -> Optional[OidcConfigResponse]:
        return self._config

    async def get_config(self) -> OidcConfigResponse:
        """Return the discovery document, fetching it on first use

        Raises:
            DiscoveryFailed: If the fetch fails
        """
        if self._config is not None:
            logger.debug("Discovery document served from cache")
            return self._config

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._fetch())

        # shield: one cancelled caller must not cancel the shared fetch
        return await asyncio.shield(self._pending)

    async def _fetch(self) -> OidcConfigResponse:
        try:
            config = await self._fetcher(self.discovery_url, self.requester)
        except DiscoveryFailed as e:
            logger.error(f"Discovery failed: {e.message}")
            raise
        except (OidcClientError, httpx.HTTPError) as e:
            logger.error(f"Discovery failed: {e}")
            raise DiscoveryFailed(
                f"Failed to fetch discovery document from {self.discovery_url}",
                details={"cause": str(e)},
            ) from e
        finally:
            self._pending = None

        self._config = config
        return config
