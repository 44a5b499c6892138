"""
Unit tests for the token store.
"""

from oidc_client import AccessToken, TokenResponse, TokenStore
from oidc_client.token_store import access_token_key
from utils.storage import MemoryStorage


def make_response(**overrides) -> TokenResponse:
    values = {
        "access_token": "access-1",
        "id_token": "id-1",
        "refresh_token": "refresh-1",
        "scope": "openid",
        "expires_in": 3600,
    }
    values.update(overrides)
    return TokenResponse(**values)


class TestTokenStore:
    """Test cases for TokenStore"""

    def test_starts_unauthenticated(self):
        store = TokenStore(MemoryStorage(), "app-a")

        assert not store.is_authenticated
        assert store.id_token is None
        assert store.refresh_token is None

    def test_loads_durable_tokens(self):
        storage = MemoryStorage({"oidc:app-a:idToken": "id-0", "oidc:app-a:refreshToken": "refresh-0"})
        store = TokenStore(storage, "app-a")

        assert store.is_authenticated
        assert store.id_token == "id-0"
        assert store.refresh_token == "refresh-0"

    def test_save_token_response(self):
        storage = MemoryStorage()
        store = TokenStore(storage, "app-a")

        access_token = store.save_token_response(make_response(), now=1000)

        assert access_token == AccessToken(token="access-1", scope="openid", expires_at=4600)
        assert storage.get_item("oidc:app-a:idToken") == "id-1"
        assert storage.get_item("oidc:app-a:refreshToken") == "refresh-1"
        assert store.get_access_token(now=1000) == access_token

    def test_access_tokens_are_not_persisted(self):
        storage = MemoryStorage()
        TokenStore(storage, "app-a").save_token_response(make_response(), now=1000)

        assert len(storage) == 2
        assert "oidc:app-a:idToken" in storage
        assert "oidc:app-a:refreshToken" in storage

    def test_missing_refresh_token_keeps_current(self):
        store = TokenStore(MemoryStorage(), "app-a")
        store.save_token_response(make_response(), now=1000)

        store.save_token_response(make_response(id_token=None, refresh_token=None), now=1000)

        assert store.refresh_token == "refresh-1"
        assert store.id_token == "id-1"

    def test_access_tokens_keyed_by_resource(self):
        store = TokenStore(MemoryStorage(), "app-a")
        store.save_token_response(make_response(access_token="default"), now=1000)
        store.save_token_response(make_response(access_token="api"), resource="https://api", now=1000)

        assert store.get_access_token(now=1000).token == "default"
        assert store.get_access_token("https://api", now=1000).token == "api"
        assert store.access_token_count == 2

    def test_expired_access_token_is_evicted(self):
        store = TokenStore(MemoryStorage(), "app-a")
        store.save_token_response(make_response(expires_in=60), now=1000)

        assert store.get_access_token(now=1059) is not None
        assert store.get_access_token(now=1060) is None
        assert store.access_token_count == 0

    def test_clear(self):
        storage = MemoryStorage()
        store = TokenStore(storage, "app-a")
        store.save_token_response(make_response(), now=1000)

        store.clear()

        assert not store.is_authenticated
        assert store.refresh_token is None
        assert store.access_token_count == 0
        assert len(storage) == 0

    def test_clients_are_isolated(self):
        storage = MemoryStorage()
        TokenStore(storage, "app-a").save_token_response(make_response(), now=1000)

        assert not TokenStore(storage, "app-b").is_authenticated

    def test_access_tokens_keyed_by_scope(self):
        store = TokenStore(MemoryStorage(), "app-a")
        store.save_token_response(make_response(access_token="read"), resource="https://api", scope="read", now=1000)

        assert store.get_access_token("https://api", "read", now=1000).token == "read"
        assert store.get_access_token("https://api", now=1000) is None
        assert store.get_access_token("https://api", "read write", now=1000) is None

    def test_access_token_key(self):
        assert access_token_key() == "@"
        assert access_token_key("https://api", "read") == "read@https://api"
