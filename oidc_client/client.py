"""Sign-in / sign-out orchestration for an OIDC relying party"""

import logging
import secrets
import webbrowser
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import parse_qs, urlparse

from utils.storage import Storage
from .discovery import OidcConfigCache, get_discovery_endpoint
from .endpoints import (
    fetch_token_by_authorization_code,
    fetch_token_by_refresh_token,
    generate_sign_in_uri,
    generate_sign_out_uri,
    revoke,
)
from .errors import CallbackError, NotAuthenticated, SignInSessionNotFound, StateMismatch
from .id_token import KeySource, create_key_source, decode_unverified, verify_id_token
from .models import IDToken, OidcClientConfig, OidcConfigResponse, SignInSessionItem, TokenResponse
from .pkce import generate_code_challenge, generate_code_verifier, generate_state
from .requester import Requester
from .session import SignInSessionStore
from .token_store import TokenStore


logger = logging.getLogger(__name__)

Navigator = Callable[[str], Any]


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    SIGN_IN_PENDING = "sign_in_pending"
    AUTHENTICATED = "authenticated"
    SIGN_OUT_IN_PROGRESS = "sign_out_in_progress"


class OidcClient:
    """Drives the Authorization Code + PKCE flow for one client configuration

    All caches (discovery document, key set, access tokens) are owned by the
    instance; two clients with different ids never share state, even when
    they share storage backends.
    """

    def __init__(
        self,
        config: OidcClientConfig,
        durable_storage: Storage,
        session_storage: Storage,
        navigate: Navigator = webbrowser.open,
        requester: Optional[Requester] = None,
        key_source: Optional[KeySource] = None,
        config_cache: Optional[OidcConfigCache] = None,
    ):
        """Initialize the client

        Args:
            config: Client configuration
            durable_storage: Storage for ID and refresh tokens
            session_storage: Ephemeral storage for the sign-in session
            navigate: Redirect capability, called with the target URL
            requester: HTTP requester shared by every provider call
            key_source: Signing key resolver (default: JWKS from discovery)
            config_cache: Discovery cache (default: built from ``config``)
        """
        self.config = config
        self.navigate = navigate
        self.requester = requester or Requester()
        self.tokens = TokenStore(durable_storage, config.client_id)
        self.sign_in_session = SignInSessionStore(session_storage, config.client_id)
        self.oidc_config = config_cache or OidcConfigCache(
            get_discovery_endpoint(config.endpoint, config.discovery_path),
            self.requester,
        )
        self._key_source = key_source
        self._signing_out = False

    @property
    def is_authenticated(self) -> bool:
        return self.tokens.is_authenticated

    @property
    def state(self) -> AuthState:
        if self._signing_out:
            return AuthState.SIGN_OUT_IN_PROGRESS
        if self.tokens.is_authenticated:
            return AuthState.AUTHENTICATED
        if self.sign_in_session.has_item():
            return AuthState.SIGN_IN_PENDING
        return AuthState.UNAUTHENTICATED

    async def get_oidc_config(self) -> OidcConfigResponse:
        return await self.oidc_config.get_config()

    async def get_key_source(self) -> KeySource:
        if self._key_source is None:
            oidc_config = await self.get_oidc_config()
            self._key_source = create_key_source(oidc_config.jwks_uri, self.requester)
        return self._key_source

    async def sign_in(self, redirect_uri: str) -> str:
        """Start a sign-in and redirect to the authorization endpoint

        Any earlier unfinished sign-in is overwritten.

        Args:
            redirect_uri: Where the provider sends the user back to

        Returns:
            The authorization URL that was navigated to
        """
        oidc_config = await self.get_oidc_config()
        code_verifier = generate_code_verifier()
        code_challenge = generate_code_challenge(code_verifier)
        state = generate_state()

        sign_in_uri = generate_sign_in_uri(
            authorization_endpoint=oidc_config.authorization_endpoint,
            client_id=self.config.client_id,
            redirect_uri=redirect_uri,
            code_challenge=code_challenge,
            state=state,
            scopes=self.config.scopes,
            resources=self.config.resources,
            prompt=self.config.prompt,
        )

        self.sign_in_session.write(
            SignInSessionItem(redirect_uri=redirect_uri, code_verifier=code_verifier, state=state)
        )
        logger.info(f"Sign-in started, redirecting to {oidc_config.authorization_endpoint}")
        self.navigate(sign_in_uri)
        return sign_in_uri

    async def handle_sign_in_callback(self, callback_uri: str) -> Dict[str, Any]:
        """Complete a sign-in from the provider's redirect

        The stored sign-in session is consumed before anything else, so a
        failed or replayed callback can never reuse the PKCE verifier.

        Args:
            callback_uri: Full URL the provider redirected to

        Returns:
            Verified ID token claims

        Raises:
            SignInSessionNotFound, CallbackError, StateMismatch,
            OidcRequestError, IdTokenVerificationError
        """
        item = self.sign_in_session.read()
        if item is None:
            raise SignInSessionNotFound("No sign-in is pending for this client")
        self.sign_in_session.write(None)

        code = self._parse_callback(callback_uri, item)

        oidc_config = await self.get_oidc_config()
        response = await fetch_token_by_authorization_code(
            token_endpoint=oidc_config.token_endpoint,
            client_id=self.config.client_id,
            code=code,
            code_verifier=item.code_verifier,
            redirect_uri=item.redirect_uri,
            requester=self.requester,
        )
        if not response.id_token:
            raise CallbackError("Token response did not include an ID token")

        claims = await self._verify(response, oidc_config)
        self.tokens.save_token_response(response)
        logger.info("Sign-in completed")
        return claims

    @staticmethod
    def _parse_callback(callback_uri: str, item: SignInSessionItem) -> str:
        if not callback_uri.startswith(item.redirect_uri):
            raise CallbackError(
                "Callback URI does not match the redirect URI of the pending sign-in",
                details={"redirect_uri": item.redirect_uri},
            )

        params = parse_qs(urlparse(callback_uri).query)
        error = params.get("error", [None])[0]
        if error:
            raise CallbackError(
                f"Authorization failed: {error}",
                details={
                    "error": error,
                    "error_description": params.get("error_description", [None])[0],
                },
            )

        state = params.get("state", [""])[0]
        if not secrets.compare_digest(state.encode(), item.state.encode()):
            logger.warning("Callback state does not match the pending sign-in")
            raise StateMismatch("Callback state does not match the pending sign-in")

        code = params.get("code", [None])[0]
        if not code:
            raise CallbackError("Callback URI has no authorization code")
        return code

    async def _verify(self, response: TokenResponse, oidc_config: OidcConfigResponse) -> Dict[str, Any]:
        key_source = await self.get_key_source()
        return await verify_id_token(
            key_source,
            response.id_token,
            audience=self.config.client_id,
            issuer=oidc_config.issuer,
        )

    async def get_access_token(
        self,
        resource: Optional[str] = None,
        scopes: Optional[List[str]] = None,
    ) -> str:
        """Return an access token for ``resource``, refreshing if needed

        Tokens are cached per resource and requested scope set; requesting
        ``scopes`` narrows the refresh grant to them.

        Raises:
            NotAuthenticated: If not signed in or no refresh token is held
        """
        if not self.is_authenticated:
            raise NotAuthenticated("Not signed in")

        scope = " ".join(scopes or [])
        cached = self.tokens.get_access_token(resource, scope)
        if cached is not None:
            return cached.token

        refresh_token = self.tokens.refresh_token
        if not refresh_token:
            raise NotAuthenticated("Access token expired and no refresh token is held")

        oidc_config = await self.get_oidc_config()
        response = await fetch_token_by_refresh_token(
            token_endpoint=oidc_config.token_endpoint,
            client_id=self.config.client_id,
            refresh_token=refresh_token,
            requester=self.requester,
            resource=resource,
            scopes=scopes,
        )
        if response.id_token:
            await self._verify(response, oidc_config)

        access_token = self.tokens.save_token_response(response, resource=resource, scope=scope)
        return access_token.token

    def get_id_token_claims(self) -> IDToken:
        """Unverified claims of the held ID token, for display only"""
        id_token = self.tokens.id_token
        if not id_token:
            raise NotAuthenticated("Not signed in")
        return decode_unverified(id_token)

    async def sign_out(self, post_logout_redirect_uri: Optional[str] = None) -> Optional[str]:
        """Sign out locally and redirect to the end-session endpoint

        Does nothing when no ID token is held. Refresh token revocation is
        best effort: its failure is logged and never blocks sign-out. Local
        token state is cleared before the redirect.

        Returns:
            The end-session URL, or None if there was nothing to sign out
        """
        id_token = self.tokens.id_token
        if not id_token:
            return None

        self._signing_out = True
        try:
            oidc_config = await self.get_oidc_config()

            refresh_token = self.tokens.refresh_token
            if refresh_token:
                try:
                    await revoke(
                        oidc_config.revocation_endpoint,
                        self.config.client_id,
                        refresh_token,
                        self.requester,
                    )
                except Exception as e:
                    logger.warning(f"Refresh token revocation failed, continuing sign-out: {e}")

            sign_out_uri = generate_sign_out_uri(
                end_session_endpoint=oidc_config.end_session_endpoint,
                id_token=id_token,
                post_logout_redirect_uri=post_logout_redirect_uri,
            )

            self.tokens.clear()
            self.sign_in_session.write(None)
        finally:
            self._signing_out = False

        logger.info("Signed out, redirecting to end-session endpoint")
        self.navigate(sign_out_uri)
        return sign_out_uri
