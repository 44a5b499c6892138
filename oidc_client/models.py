"""Data models for the OIDC client

Wire formats (JWT claims, discovery document, token responses, the stored
sign-in session) are pydantic models so a shape mismatch surfaces as a
validation error instead of a half-filled object. Internal values are plain
dataclasses.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class IDToken(BaseModel):
    """Claims of an OpenID Connect ID token

    Attributes:
        issuer: ``iss`` claim
        subject: ``sub`` claim
        audience: ``aud`` claim
        expires_at: ``exp`` claim, seconds since epoch
        issued_at: ``iat`` claim, seconds since epoch
        access_token_hash: optional ``at_hash`` claim
    """
    model_config = ConfigDict(strict=True, populate_by_name=True, frozen=True)

    issuer: str = Field(alias="iss")
    subject: str = Field(alias="sub")
    audience: str = Field(alias="aud")
    expires_at: int = Field(alias="exp")
    issued_at: int = Field(alias="iat")
    access_token_hash: Optional[str] = Field(default=None, alias="at_hash")


class SignInSessionItem(BaseModel):
    """Transient PKCE data kept across the authorization redirect"""
    model_config = ConfigDict(strict=True, populate_by_name=True, frozen=True)

    redirect_uri: str = Field(alias="redirectUri")
    code_verifier: str = Field(alias="codeVerifier")
    state: str

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class OidcConfigResponse(BaseModel):
    """Endpoints advertised by the provider's discovery document"""
    model_config = ConfigDict(frozen=True)

    issuer: str
    authorization_endpoint: str
    token_endpoint: str
    end_session_endpoint: str
    revocation_endpoint: str
    jwks_uri: str


class TokenResponse(BaseModel):
    """Successful response of the token endpoint"""

    access_token: str
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
    scope: str = ""
    expires_in: int


@dataclass
class AccessToken:
    """Short-lived access token held in memory only

    Attributes:
        token: Bearer token value
        scope: Space separated scopes granted for the token
        expires_at: Absolute expiry, Unix seconds
    """
    token: str
    scope: str
    expires_at: int

    def is_expired(self, now: Optional[float] = None) -> bool:
        if now is None:
            now = time.time()
        return now >= self.expires_at


@dataclass
class PkceCodes:
    """PKCE (Proof Key for Code Exchange) codes for OAuth flow

    Attributes:
        code_verifier: Random string used to generate code_challenge
        code_challenge: SHA256 hash of code_verifier, sent in auth request
    """
    code_verifier: str
    code_challenge: str


@dataclass
class OidcClientConfig:
    """Static configuration of one relying-party client

    Attributes:
        endpoint: Issuer base URL of the identity provider
        client_id: OAuth client identifier, also the storage namespace
        scopes: Extra scopes requested on top of the reserved ones
        resources: API resource indicators to request access for
        prompt: ``prompt`` parameter sent with the authorization request
        discovery_path: Path of the discovery document below ``endpoint``
    """
    endpoint: str
    client_id: str
    scopes: List[str] = field(default_factory=list)
    resources: List[str] = field(default_factory=list)
    prompt: str = "consent"
    discovery_path: str = "/.well-known/openid-configuration"
