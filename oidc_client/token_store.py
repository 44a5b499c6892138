"""Token state of one OIDC client

ID and refresh tokens live in durable storage under keys namespaced by the
client id. Access tokens are short-lived and resource scoped, so they are
only ever kept in memory.
"""

import logging
import time
from typing import Dict, Optional

from utils.storage import Storage
from .models import AccessToken, TokenResponse
from .utils import get_storage_key


logger = logging.getLogger(__name__)


def access_token_key(resource: Optional[str] = None, scope: str = "") -> str:
    return f"{scope}@{resource or ''}"


class TokenStore:
    """Sole owner and mutator of the client's token state"""

    def __init__(self, storage: Storage, client_id: str):
        self.storage = storage
        self.storage_key = get_storage_key(client_id)
        self._access_tokens: Dict[str, AccessToken] = {}
        self._id_token = storage.get_item(self.id_token_key)
        self._refresh_token = storage.get_item(self.refresh_token_key)

    @property
    def id_token_key(self) -> str:
        return f"{self.storage_key}:idToken"

    @property
    def refresh_token_key(self) -> str:
        return f"{self.storage_key}:refreshToken"

    @property
    def id_token(self) -> Optional[str]:
        return self._id_token

    @property
    def refresh_token(self) -> Optional[str]:
        return self._refresh_token

    @property
    def is_authenticated(self) -> bool:
        return self._id_token is not None

    def set_id_token(self, id_token: Optional[str]) -> None:
        self._id_token = id_token
        self._persist(self.id_token_key, id_token)

    def set_refresh_token(self, refresh_token: Optional[str]) -> None:
        self._refresh_token = refresh_token
        self._persist(self.refresh_token_key, refresh_token)

    def _persist(self, key: str, value: Optional[str]) -> None:
        if value is None:
            self.storage.remove_item(key)
        else:
            self.storage.set_item(key, value)

    def get_access_token(
        self,
        resource: Optional[str] = None,
        scope: str = "",
        now: Optional[float] = None,
    ) -> Optional[AccessToken]:
        """Return a cached access token, evicting it if it has expired"""
        key = access_token_key(resource, scope)
        access_token = self._access_tokens.get(key)
        if access_token is None:
            return None

        if access_token.is_expired(now):
            logger.debug(f"Evicting expired access token for {key!r}")
            del self._access_tokens[key]
            return None
        return access_token

    def set_access_token(
        self,
        access_token: AccessToken,
        resource: Optional[str] = None,
        scope: str = "",
    ) -> None:
        self._access_tokens[access_token_key(resource, scope)] = access_token

    @property
    def access_token_count(self) -> int:
        return len(self._access_tokens)

    def save_token_response(
        self,
        response: TokenResponse,
        resource: Optional[str] = None,
        now: Optional[float] = None,
        scope: str = "",
    ) -> AccessToken:
        """Store the tokens of a token endpoint response

        A missing refresh token keeps the one already held. The access token
        is cached under the requested ``resource`` and ``scope``.

        Returns:
            The cached AccessToken
        """
        if now is None:
            now = time.time()

        if response.id_token is not None:
            self.set_id_token(response.id_token)
        if response.refresh_token is not None:
            self.set_refresh_token(response.refresh_token)

        access_token = AccessToken(
            token=response.access_token,
            scope=response.scope,
            expires_at=int(now) + response.expires_in,
        )
        self.set_access_token(access_token, resource=resource, scope=scope)
        return access_token

    def clear(self) -> None:
        """Forget every token, in memory and in durable storage"""
        self._access_tokens.clear()
        self.set_id_token(None)
        self.set_refresh_token(None)
        logger.debug("Token store cleared")
