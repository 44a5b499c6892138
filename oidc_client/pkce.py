"""PKCE (Proof Key for Code Exchange) and state generation"""

import base64
import hashlib
import secrets

from .models import PkceCodes


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def generate_code_verifier() -> str:
    """Generate a high-entropy code verifier

    32 random bytes encode to 43 base64url characters, the PKCE minimum.

    Returns:
        Code verifier string
    """
    return _b64url(secrets.token_bytes(32))


def generate_code_challenge(code_verifier: str) -> str:
    """Derive the S256 code challenge for a verifier

    Args:
        code_verifier: Verifier produced by generate_code_verifier

    Returns:
        Base64url encoded SHA-256 digest without padding
    """
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return _b64url(digest)


def generate_state() -> str:
    """Generate a random anti-CSRF state value"""
    return _b64url(secrets.token_bytes(32))


def generate_pkce() -> PkceCodes:
    """Generate a fresh verifier/challenge pair"""
    code_verifier = generate_code_verifier()
    return PkceCodes(
        code_verifier=code_verifier,
        code_challenge=generate_code_challenge(code_verifier),
    )
