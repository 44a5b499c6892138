import pytest

from support import CLIENT_ID, DISCOVERY_URL, ISSUER, JWKS_URI, OIDC_CONFIG, FakeProvider, RsaKey


@pytest.fixture(scope="session")
def rsa_key():
    """Signing key shared by the whole run; RSA generation is slow"""
    return RsaKey("key-1")


@pytest.fixture(scope="session")
def other_rsa_key():
    return RsaKey("key-2")


@pytest.fixture
def provider(rsa_key):
    """Fake identity provider with discovery and JWKS routes"""
    fake = FakeProvider()
    fake.json(DISCOVERY_URL, OIDC_CONFIG)
    fake.json(JWKS_URI, {"keys": [rsa_key.jwk]})
    return fake


@pytest.fixture
def client_id():
    return CLIENT_ID


@pytest.fixture
def issuer():
    return ISSUER
