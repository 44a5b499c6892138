"""OpenID Connect relying-party client

Authorization Code flow with PKCE, ID token verification against a remote
key set, and token lifecycle management.
"""

from .client import AuthState, OidcClient
from .discovery import OidcConfigCache, fetch_oidc_config, get_discovery_endpoint
from .endpoints import (
    fetch_token_by_authorization_code,
    fetch_token_by_refresh_token,
    generate_sign_in_uri,
    generate_sign_out_uri,
    revoke,
    with_reserved_scopes,
)
from .errors import (
    AlgorithmMismatch,
    AudienceMismatch,
    CallbackError,
    DiscoveryFailed,
    IdTokenVerificationError,
    InvalidSignInSession,
    InvalidTokenFormat,
    InvalidTokenSchema,
    KeySetFetchFailed,
    NotAuthenticated,
    OidcClientError,
    OidcRequestError,
    SignatureInvalid,
    SignInSessionNotFound,
    StateMismatch,
    TokenExpired,
)
from .id_token import (
    CLOCK_TOLERANCE,
    EXPECTED_ALG,
    create_key_source,
    decode_unverified,
    verify_id_token,
)
from .jwks import RemoteKeySet
from .models import (
    AccessToken,
    IDToken,
    OidcClientConfig,
    OidcConfigResponse,
    PkceCodes,
    SignInSessionItem,
    TokenResponse,
)
from .pkce import generate_code_challenge, generate_code_verifier, generate_pkce, generate_state
from .requester import Requester
from .session import SignInSessionStore
from .token_store import TokenStore

__all__ = [
    "AuthState",
    "OidcClient",
    "OidcConfigCache",
    "fetch_oidc_config",
    "get_discovery_endpoint",
    "fetch_token_by_authorization_code",
    "fetch_token_by_refresh_token",
    "generate_sign_in_uri",
    "generate_sign_out_uri",
    "revoke",
    "with_reserved_scopes",
    "AlgorithmMismatch",
    "AudienceMismatch",
    "CallbackError",
    "DiscoveryFailed",
    "IdTokenVerificationError",
    "InvalidSignInSession",
    "InvalidTokenFormat",
    "InvalidTokenSchema",
    "KeySetFetchFailed",
    "NotAuthenticated",
    "OidcClientError",
    "OidcRequestError",
    "SignatureInvalid",
    "SignInSessionNotFound",
    "StateMismatch",
    "TokenExpired",
    "CLOCK_TOLERANCE",
    "EXPECTED_ALG",
    "create_key_source",
    "decode_unverified",
    "verify_id_token",
    "RemoteKeySet",
    "AccessToken",
    "IDToken",
    "OidcClientConfig",
    "OidcConfigResponse",
    "PkceCodes",
    "SignInSessionItem",
    "TokenResponse",
    "generate_code_challenge",
    "generate_code_verifier",
    "generate_pkce",
    "generate_state",
    "Requester",
    "SignInSessionStore",
    "TokenStore",
]
