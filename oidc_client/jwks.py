"""Remote JSON Web Key Set cache

Keys are fetched on first use and reused afterwards. A token whose ``kid``
is not in the cached set triggers one refetch (key rotation), throttled by a
cooldown so a stream of unknown ids cannot turn into a fetch per call.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional

import jwt
from jwt.exceptions import PyJWKError, PyJWKSetError

from .errors import InvalidTokenFormat, KeySetFetchFailed, OidcRequestError, SignatureInvalid
from .requester import Requester


logger = logging.getLogger(__name__)

CACHE_MAX_AGE = 600
REFETCH_COOLDOWN = 30
SIGNING_ALG = "RS256"


class RemoteKeySet:
    """Resolves signing keys for JWTs from a provider's ``jwks_uri``"""

    def __init__(
        self,
        jwks_uri: str,
        requester: Optional[Requester] = None,
        cache_max_age: float = CACHE_MAX_AGE,
        cooldown: float = REFETCH_COOLDOWN,
        clock: Callable[[], float] = time.monotonic,
        algorithm: str = SIGNING_ALG,
    ):
        self.jwks_uri = jwks_uri
        self.algorithm = algorithm
        self.requester = requester or Requester()
        self.cache_max_age = cache_max_age
        self.cooldown = cooldown
        self._clock = clock
        self._key_set: Optional[jwt.PyJWKSet] = None
        self._fetched_at: Optional[float] = None
        self._pending: Optional["asyncio.Task[jwt.PyJWKSet]"] = None

    async def get_signing_key(self, token: str) -> jwt.PyJWK:
        """Find the key that should have signed ``token``

        Args:
            token: Compact JWT

        Returns:
            Matching PyJWK

        Raises:
            InvalidTokenFormat: If the JWT header cannot be read
            KeySetFetchFailed: If the key set cannot be fetched
            SignatureInvalid: If no key matches the token
        """
        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError as e:
            raise InvalidTokenFormat(f"Invalid token header: {e}") from e

        kid = header.get("kid")

        if self._is_stale():
            await self._reload()

        key = self._find(kid)
        if key is None and self._can_refetch():
            logger.warning(f"No key with kid={kid!r} in cached JWKS, refetching {self.jwks_uri}")
            await self._reload()
            key = self._find(kid)

        if key is None:
            raise SignatureInvalid(
                "No key in the remote key set matches the token",
                details={"kid": kid, "jwks_uri": self.jwks_uri},
            )
        return key

    def clear(self) -> None:
        """Drop the cached key set"""
        self._key_set = None
        self._fetched_at = None
        logger.debug("JWKS cache cleared")

    def _find(self, kid: Optional[str]) -> Optional[jwt.PyJWK]:
        if self._key_set is None:
            return None

        # keys for another algorithm can never verify our tokens
        keys = [key for key in self._key_set.keys if key.algorithm_name == self.algorithm]
        if kid is None:
            # without a kid only an unambiguous single key is usable
            return keys[0] if len(keys) == 1 else None

        for key in keys:
            if key.key_id == kid:
                return key
        return None

    def _is_stale(self) -> bool:
        if self._key_set is None or self._fetched_at is None:
            return True
        return self._clock() - self._fetched_at >= self.cache_max_age

    def _can_refetch(self) -> bool:
        if self._fetched_at is None:
            return True
        return self._clock() - self._fetched_at >= self.cooldown

    async def _reload(self) -> jwt.PyJWKSet:
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._fetch())
        return await asyncio.shield(self._pending)

    async def _fetch(self) -> jwt.PyJWKSet:
        try:
            payload = await self.requester.get_json(self.jwks_uri)
            key_set = _parse_key_set(payload)
        except OidcRequestError as e:
            logger.error(f"Failed to fetch JWKS from {self.jwks_uri}: {e.message}")
            raise KeySetFetchFailed(
                f"Failed to fetch JWKS from {self.jwks_uri}",
                details={"cause": e.message, "status_code": e.status_code},
            ) from e
        finally:
            self._pending = None

        self._key_set = key_set
        self._fetched_at = self._clock()
        logger.info(f"JWKS refreshed from {self.jwks_uri} ({len(key_set.keys)} keys)")
        return key_set


def _parse_key_set(payload: Any) -> jwt.PyJWKSet:
    if not isinstance(payload, dict) or not isinstance(payload.get("keys"), list):
        raise KeySetFetchFailed("JWKS response has no 'keys' array")

    signing_keys: Dict[str, Any] = {
        "keys": [
            key for key in payload["keys"]
            if isinstance(key, dict) and key.get("use", "sig") == "sig"
        ]
    }
    try:
        return jwt.PyJWKSet.from_dict(signing_keys)
    except (PyJWKSetError, PyJWKError) as e:
        raise KeySetFetchFailed(f"JWKS contains no usable signing keys: {e}") from e
