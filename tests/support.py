"""Helpers shared by the test modules"""

import base64
import json
import time
from typing import Any, Callable, Dict, List, Optional

import httpx
import jwt
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from jwt.algorithms import ECAlgorithm, RSAAlgorithm

ISSUER = "https://idp.example.com/oidc"
CLIENT_ID = "app-a"
DISCOVERY_URL = f"{ISSUER}/.well-known/openid-configuration"
JWKS_URI = f"{ISSUER}/jwks"

OIDC_CONFIG = {
    "issuer": ISSUER,
    "authorization_endpoint": f"{ISSUER}/auth",
    "token_endpoint": f"{ISSUER}/token",
    "end_session_endpoint": f"{ISSUER}/session/end",
    "revocation_endpoint": f"{ISSUER}/token/revocation",
    "jwks_uri": JWKS_URI,
}


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def encode_segment(obj: Any) -> str:
    return b64url(json.dumps(obj).encode("utf-8"))


def make_unsigned_token(payload: Any, header: Optional[Dict[str, Any]] = None) -> str:
    header = header or {"alg": "RS256", "typ": "JWT"}
    return f"{encode_segment(header)}.{encode_segment(payload)}.c2lnbmF0dXJl"


def id_token_claims(**overrides: Any) -> Dict[str, Any]:
    now = int(time.time())
    claims = {
        "iss": ISSUER,
        "sub": "user-1",
        "aud": CLIENT_ID,
        "exp": now + 3600,
        "iat": now,
    }
    claims.update(overrides)
    return claims


class RsaKey:
    """An RSA signing key and its public JWK"""

    def __init__(self, kid: str = "key-1"):
        self.kid = kid
        self.private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

    @property
    def jwk(self) -> Dict[str, Any]:
        data = json.loads(RSAAlgorithm.to_jwk(self.private_key.public_key()))
        data.update({"kid": self.kid, "alg": "RS256", "use": "sig"})
        return data

    def sign(self, claims: Dict[str, Any], algorithm: str = "RS256", kid: Optional[str] = None) -> str:
        return jwt.encode(
            claims,
            self.private_key,
            algorithm=algorithm,
            headers={"kid": kid or self.kid},
        )


class EcKey:
    """A P-256 key published as an ES256 JWK"""

    def __init__(self, kid: str = "ec-1"):
        self.kid = kid
        self.private_key = ec.generate_private_key(ec.SECP256R1())

    @property
    def jwk(self) -> Dict[str, Any]:
        data = json.loads(ECAlgorithm.to_jwk(self.private_key.public_key()))
        data.update({"kid": self.kid, "alg": "ES256", "use": "sig"})
        return data


class StaticKeySource:
    """Key source serving fixed keys without any HTTP"""

    def __init__(self, *keys: Any):
        self.keys = {key.kid: jwt.PyJWK(key.jwk) for key in keys}
        self.calls = 0

    async def get_signing_key(self, token: str) -> jwt.PyJWK:
        self.calls += 1
        kid = jwt.get_unverified_header(token).get("kid")
        return self.keys[kid]


class FakeProvider:
    """Routes httpx requests to canned responses and records them"""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def route(self, url: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[url] = handler

    def json(self, url: str, payload: Any, status_code: int = 200) -> None:
        self.route(url, lambda request: httpx.Response(status_code, json=payload))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url).split("?")[0]
        if url not in self.routes:
            return httpx.Response(404, text="not found")
        return self.routes[url](request)

    def calls_to(self, url: str) -> List[httpx.Request]:
        return [r for r in self.requests if str(r.url).split("?")[0] == url]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


class RecordingNavigator:
    """Navigation double recording target URLs instead of opening a browser"""

    def __init__(self):
        self.urls: List[str] = []

    def __call__(self, url: str) -> None:
        self.urls.append(url)
