"""Authorization, end-session, revocation and token endpoint calls"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urlencode

from pydantic import ValidationError

from .errors import OidcRequestError
from .models import TokenResponse
from .requester import Requester


logger = logging.getLogger(__name__)

RESERVED_SCOPES = ["openid", "offline_access", "profile"]


def with_reserved_scopes(scopes: Optional[Iterable[str]] = None) -> str:
    """Union the requested scopes with the reserved ones

    Reserved scopes come first, duplicates are dropped, order is stable.

    Returns:
        Space separated scope string
    """
    merged: List[str] = []
    for scope in [*RESERVED_SCOPES, *(scopes or [])]:
        if scope and scope not in merged:
            merged.append(scope)
    return " ".join(merged)


def _join_query(endpoint: str, params: Sequence[Tuple[str, str]]) -> str:
    separator = "&" if "?" in endpoint else "?"
    return f"{endpoint}{separator}{urlencode(params)}"


def generate_sign_in_uri(
    authorization_endpoint: str,
    client_id: str,
    redirect_uri: str,
    code_challenge: str,
    state: str,
    scopes: Optional[Iterable[str]] = None,
    resources: Optional[Iterable[str]] = None,
    prompt: Optional[str] = "consent",
) -> str:
    """Build the authorization request URL with PKCE

    Returns:
        Full authorization URL
    """
    params = [
        ("client_id", client_id),
        ("redirect_uri", redirect_uri),
        ("code_challenge", code_challenge),
        ("code_challenge_method", "S256"),
        ("state", state),
        ("scope", with_reserved_scopes(scopes)),
        ("response_type", "code"),
    ]
    if prompt:
        params.append(("prompt", prompt))
    for resource in resources or []:
        params.append(("resource", resource))

    return _join_query(authorization_endpoint, params)


def generate_sign_out_uri(
    end_session_endpoint: str,
    id_token: str,
    post_logout_redirect_uri: Optional[str] = None,
) -> str:
    """Build the RP-initiated logout URL"""
    params = [("id_token_hint", id_token)]
    if post_logout_redirect_uri:
        params.append(("post_logout_redirect_uri", post_logout_redirect_uri))
    return _join_query(end_session_endpoint, params)


async def revoke(
    revocation_endpoint: str,
    client_id: str,
    token: str,
    requester: Requester,
) -> None:
    """Revoke a refresh token (RFC 7009)

    Raises:
        OidcRequestError: If the provider rejects the request
    """
    await requester.post_form(
        revocation_endpoint,
        {"token": token, "client_id": client_id},
    )
    logger.info("Refresh token revoked")


def _parse_token_response(token_endpoint: str, payload: object) -> TokenResponse:
    try:
        return TokenResponse.model_validate(payload)
    except ValidationError as e:
        raise OidcRequestError(
            f"Token endpoint {token_endpoint} returned an incomplete response",
            details={"errors": e.errors(include_url=False, include_input=False)},
        ) from e


async def fetch_token_by_authorization_code(
    token_endpoint: str,
    client_id: str,
    code: str,
    code_verifier: str,
    redirect_uri: str,
    requester: Requester,
) -> TokenResponse:
    """Exchange an authorization code for tokens

    Returns:
        TokenResponse with access, ID and (usually) refresh token
    """
    logger.info(f"Exchanging authorization code for tokens at {token_endpoint}")
    payload = await requester.post_form(
        token_endpoint,
        {
            "grant_type": "authorization_code",
            "client_id": client_id,
            "code": code,
            "code_verifier": code_verifier,
            "redirect_uri": redirect_uri,
        },
    )
    return _parse_token_response(token_endpoint, payload)


async def fetch_token_by_refresh_token(
    token_endpoint: str,
    client_id: str,
    refresh_token: str,
    requester: Requester,
    resource: Optional[str] = None,
    scopes: Optional[Iterable[str]] = None,
) -> TokenResponse:
    """Use a refresh token to obtain a new access token

    Returns:
        TokenResponse; ``refresh_token`` is None when the provider does not rotate it
    """
    data = [
        ("grant_type", "refresh_token"),
        ("client_id", client_id),
        ("refresh_token", refresh_token),
    ]
    if resource:
        data.append(("resource", resource))
    if scopes:
        data.append(("scope", " ".join(scopes)))

    logger.info("Refreshing tokens")
    payload = await requester.post_form(token_endpoint, data)
    return _parse_token_response(token_endpoint, payload)
