"""Error types raised by the OIDC client

Every error carries a machine readable ``code`` so callers can branch on the
failure kind without string matching. Decode and verification failures are
always raised, never folded into an "unauthenticated" result.
"""

from typing import Any, Dict, Optional


class OidcClientError(Exception):
    """Base exception for the OIDC client"""

    code = "oidc_client.error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for logs and CLI output"""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidTokenFormat(OidcClientError):
    """Token is not a decodable JWT (missing payload, bad base64, not JSON)"""

    code = "id_token.invalid_format"


class InvalidTokenSchema(OidcClientError):
    """Token payload is JSON but does not have the ID token claim shape"""

    code = "id_token.invalid_schema"


class IdTokenVerificationError(OidcClientError):
    """ID token failed cryptographic or claim verification"""

    code = "id_token.verification_failed"


class SignatureInvalid(IdTokenVerificationError):
    code = "id_token.signature_invalid"


class AlgorithmMismatch(IdTokenVerificationError):
    code = "id_token.algorithm_mismatch"


class AudienceMismatch(IdTokenVerificationError):
    code = "id_token.audience_mismatch"


class TokenExpired(IdTokenVerificationError):
    code = "id_token.expired"


class KeySetFetchFailed(IdTokenVerificationError):
    """The remote JWKS could not be fetched or parsed"""

    code = "id_token.jwks_fetch_failed"


class InvalidSignInSession(OidcClientError):
    """Stored sign-in session data is corrupt or has been tampered with"""

    code = "sign_in_session.invalid"


class SignInSessionNotFound(OidcClientError):
    """A callback arrived but no sign-in was started"""

    code = "sign_in_session.not_found"


class CallbackError(OidcClientError):
    """The authorization callback URL is unusable"""

    code = "callback.invalid"


class StateMismatch(CallbackError):
    code = "callback.state_mismatch"


class DiscoveryFailed(OidcClientError):
    """The OpenID discovery document could not be fetched or parsed"""

    code = "discovery.failed"


class OidcRequestError(OidcClientError):
    """An HTTP call to the identity provider failed"""

    code = "request.failed"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        super().__init__(message, details)


class NotAuthenticated(OidcClientError):
    code = "client.not_authenticated"
