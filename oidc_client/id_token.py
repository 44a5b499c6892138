"""ID token decoding and verification

``decode_unverified`` reads claims without any cryptographic check and must
only be used for display before verification completes. Trust in claims
comes from ``verify_id_token``.
"""

import base64
import binascii
import json
import logging
from typing import Any, Dict, Optional, Protocol

import jwt
from pydantic import ValidationError

from .errors import (
    AlgorithmMismatch,
    AudienceMismatch,
    IdTokenVerificationError,
    InvalidTokenFormat,
    InvalidTokenSchema,
    SignatureInvalid,
    TokenExpired,
)
from .jwks import RemoteKeySet
from .models import IDToken
from .requester import Requester


logger = logging.getLogger(__name__)

EXPECTED_ALG = "RS256"
CLOCK_TOLERANCE = 60  # seconds

REQUIRED_CLAIMS = ["iss", "sub", "aud", "exp", "iat"]


class KeySource(Protocol):
    async def get_signing_key(self, token: str) -> jwt.PyJWK: ...


def restore_padding(segment: str) -> str:
    """Pad an unpadded base64url segment to a multiple of 4

    Raises:
        InvalidTokenFormat: If the length can never be valid base64
    """
    remainder = len(segment) % 4
    if remainder == 1:
        raise InvalidTokenFormat("invalid token: malformed base64 payload")
    return segment + "=" * ((4 - remainder) % 4)


def decode_unverified(token: str) -> IDToken:
    """Decode the ID token payload without verifying it

    Args:
        token: Compact JWT

    Returns:
        IDToken claims

    Raises:
        InvalidTokenFormat: No payload segment, bad base64/UTF-8, or not JSON
        InvalidTokenSchema: JSON payload lacking the required claims
    """
    parts = token.split(".")
    if len(parts) < 2 or not parts[1]:
        raise InvalidTokenFormat("invalid token")

    try:
        raw = base64.b64decode(restore_padding(parts[1]), altchars=b"-_", validate=True)
        text = raw.decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise InvalidTokenFormat("invalid token: payload is not base64url encoded UTF-8") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidTokenFormat("invalid token: JSON parse failed") from e

    return _validate_claims(data)


def _validate_claims(data: Any) -> IDToken:
    try:
        return IDToken.model_validate(data)
    except ValidationError as e:
        raise InvalidTokenSchema(
            "invalid token: claims do not match the ID token schema",
            details={"errors": e.errors(include_url=False, include_input=False)},
        ) from e


def create_key_source(jwks_uri: str, requester: Optional[Requester] = None) -> RemoteKeySet:
    """Create a cached key source for a provider's ``jwks_uri``"""
    return RemoteKeySet(jwks_uri, requester=requester, algorithm=EXPECTED_ALG)


async def verify_id_token(
    key_source: KeySource,
    token: str,
    audience: str,
    issuer: Optional[str] = None,
    leeway: int = CLOCK_TOLERANCE,
) -> Dict[str, Any]:
    """Verify signature, algorithm, audience and expiry of an ID token

    Args:
        key_source: Resolves the signing key for the token
        token: Compact JWT
        audience: Expected ``aud`` (the client id)
        issuer: Expected ``iss``; not checked when None
        leeway: Clock skew tolerance in seconds

    Returns:
        Verified claims

    Raises:
        AlgorithmMismatch, SignatureInvalid, AudienceMismatch, TokenExpired,
        InvalidTokenFormat, InvalidTokenSchema, IdTokenVerificationError
    """
    try:
        header = jwt.get_unverified_header(token)
    except jwt.PyJWTError as e:
        raise InvalidTokenFormat(f"invalid token: {e}") from e

    alg = header.get("alg")
    if alg != EXPECTED_ALG:
        raise AlgorithmMismatch(
            f"Token is signed with {alg!r}, expected {EXPECTED_ALG}",
            details={"alg": alg},
        )

    signing_key = await key_source.get_signing_key(token)
    if signing_key.algorithm_name != EXPECTED_ALG:
        raise SignatureInvalid(
            f"Key {signing_key.key_id!r} cannot verify {EXPECTED_ALG} signatures",
            details={"kid": signing_key.key_id, "key_alg": signing_key.algorithm_name},
        )

    try:
        claims = jwt.decode(
            token,
            signing_key.key,
            algorithms=[EXPECTED_ALG],
            audience=audience,
            issuer=issuer,
            leeway=leeway,
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpired("ID token has expired") from e
    except jwt.InvalidAudienceError as e:
        raise AudienceMismatch(
            f"ID token audience does not match {audience!r}",
            details={"expected": audience},
        ) from e
    except jwt.InvalidAlgorithmError as e:
        raise AlgorithmMismatch(str(e)) from e
    except jwt.InvalidSignatureError as e:
        raise SignatureInvalid("ID token signature verification failed") from e
    except jwt.DecodeError as e:
        raise InvalidTokenFormat(f"invalid token: {e}") from e
    except jwt.PyJWTError as e:
        raise IdTokenVerificationError(f"ID token verification failed: {e}") from e

    # a list audience was already matched against ours; the model holds one string
    if isinstance(claims.get("aud"), list):
        _validate_claims(dict(claims, aud=audience))
    else:
        _validate_claims(claims)
    logger.debug("ID token verified")
    return claims
