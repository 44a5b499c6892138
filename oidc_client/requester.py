"""HTTP requester used for every call to the identity provider"""

import json
import logging
from typing import Any, Dict, Optional, Sequence, Tuple, Union
from urllib.parse import urlencode

import httpx

from .errors import OidcRequestError


logger = logging.getLogger(__name__)

FormData = Union[Dict[str, Any], Sequence[Tuple[str, Any]]]

DEFAULT_TIMEOUT = 30.0


class Requester:
    """Thin wrapper around httpx that turns failures into OidcRequestError

    A shared ``httpx.AsyncClient`` may be injected (connection reuse, tests
    with ``httpx.MockTransport``). Without one, a short-lived client is opened
    per request.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.client = client
        self.timeout = timeout

    async def get_json(self, url: str) -> Any:
        """GET a URL and parse the JSON body

        Args:
            url: Absolute URL

        Returns:
            Parsed JSON value
        """
        response = await self._send("GET", url)
        return self._parse_json(url, response)

    async def post_form(self, url: str, data: FormData) -> Any:
        """POST an urlencoded form and parse the JSON body if there is one

        Args:
            url: Absolute URL
            data: Form fields; a sequence of pairs allows repeated keys

        Returns:
            Parsed JSON value, or None for an empty body
        """
        response = await self._send(
            "POST",
            url,
            content=urlencode(data, doseq=True),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        if not response.content:
            return None
        return self._parse_json(url, response)

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            if self.client is not None:
                response = await self.client.request(method, url, timeout=self.timeout, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"{method} {url} timed out after {self.timeout} seconds: {e}")
            raise OidcRequestError(f"Request to {url} timed out") from e
        except httpx.RequestError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise OidcRequestError(f"Request to {url} failed: {e}") from e

        logger.debug(f"{method} {url} -> {response.status_code}")

        if not response.is_success:
            raise OidcRequestError(
                f"{method} {url} returned status {response.status_code}",
                status_code=response.status_code,
                details={"body": response.text[:500]},
            )
        return response

    @staticmethod
    def _parse_json(url: str, response: httpx.Response) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise OidcRequestError(
                f"Response from {url} is not valid JSON",
                status_code=response.status_code,
            ) from e
