"""
Unit tests for ID token decoding and verification.
"""

import time

import jwt
import pytest

from oidc_client import (
    AlgorithmMismatch,
    AudienceMismatch,
    IDToken,
    IdTokenVerificationError,
    InvalidTokenFormat,
    InvalidTokenSchema,
    SignatureInvalid,
    TokenExpired,
    decode_unverified,
    verify_id_token,
)
from oidc_client.id_token import restore_padding

from support import (
    CLIENT_ID,
    ISSUER,
    EcKey,
    StaticKeySource,
    b64url,
    encode_segment,
    id_token_claims,
    make_unsigned_token,
)


class TestDecodeUnverified:
    """Test cases for decode_unverified."""

    def test_decodes_claims(self):
        claims = id_token_claims(sub="user-42", at_hash="abc")
        decoded = decode_unverified(make_unsigned_token(claims))

        assert decoded.issuer == ISSUER
        assert decoded.subject == "user-42"
        assert decoded.audience == CLIENT_ID
        assert decoded.expires_at == claims["exp"]
        assert decoded.issued_at == claims["iat"]
        assert decoded.access_token_hash == "abc"

    def test_round_trip_without_optional_claim(self):
        claims = id_token_claims()
        decoded = decode_unverified(make_unsigned_token(claims))

        assert decoded.model_dump(by_alias=True, exclude_none=True) == claims

    def test_extra_claims_are_ignored(self):
        decoded = decode_unverified(make_unsigned_token(id_token_claims(email="a@example.com")))
        assert isinstance(decoded, IDToken)

    def test_non_ascii_claims(self):
        decoded = decode_unverified(make_unsigned_token(id_token_claims(sub="użytkownik-名前")))
        assert decoded.subject == "użytkownik-名前"

    @pytest.mark.parametrize("token", ["", "header-only", "header."])
    def test_missing_payload_segment(self, token):
        with pytest.raises(InvalidTokenFormat):
            decode_unverified(token)

    def test_payload_not_json(self):
        token = f"{encode_segment({'alg': 'RS256'})}.{b64url(b'not json')}.sig"
        with pytest.raises(InvalidTokenFormat, match="JSON parse failed"):
            decode_unverified(token)

    def test_payload_not_base64(self):
        with pytest.raises(InvalidTokenFormat):
            decode_unverified("aGVhZGVy.!!!!.sig")

    def test_missing_required_claim_is_schema_error(self):
        claims = id_token_claims()
        del claims["sub"]
        with pytest.raises(InvalidTokenSchema):
            decode_unverified(make_unsigned_token(claims))

    def test_wrong_claim_type_is_schema_error(self):
        with pytest.raises(InvalidTokenSchema):
            decode_unverified(make_unsigned_token(id_token_claims(exp="tomorrow")))

    def test_json_array_payload_is_schema_error(self):
        with pytest.raises(InvalidTokenSchema):
            decode_unverified(make_unsigned_token(["not", "claims"]))

    def test_schema_error_is_not_format_error(self):
        with pytest.raises(InvalidTokenSchema) as exc_info:
            decode_unverified(make_unsigned_token({"iss": ISSUER}))
        assert not isinstance(exc_info.value, InvalidTokenFormat)


class TestRestorePadding:
    """Test cases for base64url padding restoration."""

    @pytest.mark.parametrize(
        "segment,expected",
        [("abcd", "abcd"), ("abcdef", "abcdef=="), ("abcdefg", "abcdefg="), ("", "")],
    )
    def test_pads_to_multiple_of_four(self, segment, expected):
        assert restore_padding(segment) == expected

    def test_remainder_one_is_invalid(self):
        with pytest.raises(InvalidTokenFormat):
            restore_padding("abcde")

    @pytest.mark.parametrize("sub", ["u", "us", "use", "user"])
    def test_every_payload_length_class_decodes(self, sub):
        # varying the subject length walks the payload through each length mod 4
        claims = id_token_claims(sub=sub)
        assert decode_unverified(make_unsigned_token(claims)).subject == sub


class TestVerifyIdToken:
    """Test cases for verify_id_token."""

    @pytest.mark.asyncio
    async def test_valid_token(self, rsa_key):
        token = rsa_key.sign(id_token_claims())

        claims = await verify_id_token(StaticKeySource(rsa_key), token, CLIENT_ID, issuer=ISSUER)

        assert claims["sub"] == "user-1"
        assert claims["aud"] == CLIENT_ID

    @pytest.mark.asyncio
    async def test_rejects_other_rsa_algorithm(self, rsa_key):
        token = rsa_key.sign(id_token_claims(), algorithm="RS512")
        key_source = StaticKeySource(rsa_key)

        with pytest.raises(AlgorithmMismatch):
            await verify_id_token(key_source, token, CLIENT_ID)
        assert key_source.calls == 0

    @pytest.mark.asyncio
    async def test_rejects_hmac_token(self, rsa_key):
        token = jwt.encode(id_token_claims(), "shared-secret-that-is-long-enough-for-hs256", algorithm="HS256")

        with pytest.raises(AlgorithmMismatch):
            await verify_id_token(StaticKeySource(rsa_key), token, CLIENT_ID)

    @pytest.mark.asyncio
    async def test_rejects_none_algorithm(self, rsa_key):
        token = make_unsigned_token(id_token_claims(), header={"alg": "none"})

        with pytest.raises(AlgorithmMismatch):
            await verify_id_token(StaticKeySource(rsa_key), token, CLIENT_ID)

    @pytest.mark.asyncio
    async def test_audience_mismatch(self, rsa_key):
        token = rsa_key.sign(id_token_claims(aud="app-a"))

        with pytest.raises(AudienceMismatch):
            await verify_id_token(StaticKeySource(rsa_key), token, "app-b")

    @pytest.mark.asyncio
    async def test_expired_within_tolerance_passes(self, rsa_key):
        now = int(time.time())
        token = rsa_key.sign(id_token_claims(exp=now - 30, iat=now - 3600))

        claims = await verify_id_token(StaticKeySource(rsa_key), token, CLIENT_ID, leeway=60)
        assert claims["exp"] == now - 30

    @pytest.mark.asyncio
    async def test_expired_beyond_tolerance_fails(self, rsa_key):
        now = int(time.time())
        token = rsa_key.sign(id_token_claims(exp=now - 120, iat=now - 3600))

        with pytest.raises(TokenExpired):
            await verify_id_token(StaticKeySource(rsa_key), token, CLIENT_ID, leeway=60)

    @pytest.mark.asyncio
    async def test_signature_from_wrong_key(self, rsa_key, other_rsa_key):
        # signed by key-2 but advertised as key-1
        token = other_rsa_key.sign(id_token_claims(), kid=rsa_key.kid)

        with pytest.raises(SignatureInvalid):
            await verify_id_token(StaticKeySource(rsa_key), token, CLIENT_ID)

    @pytest.mark.asyncio
    async def test_tampered_payload(self, rsa_key):
        header, _, signature = rsa_key.sign(id_token_claims()).split(".")
        forged = f"{header}.{encode_segment(id_token_claims(sub='admin'))}.{signature}"

        with pytest.raises(SignatureInvalid):
            await verify_id_token(StaticKeySource(rsa_key), forged, CLIENT_ID)

    @pytest.mark.asyncio
    async def test_issuer_mismatch(self, rsa_key):
        token = rsa_key.sign(id_token_claims(iss="https://evil.example.com"))

        with pytest.raises(IdTokenVerificationError):
            await verify_id_token(StaticKeySource(rsa_key), token, CLIENT_ID, issuer=ISSUER)

    @pytest.mark.asyncio
    async def test_missing_required_claim(self, rsa_key):
        claims = id_token_claims()
        del claims["iat"]
        token = rsa_key.sign(claims)

        with pytest.raises(IdTokenVerificationError):
            await verify_id_token(StaticKeySource(rsa_key), token, CLIENT_ID)

    @pytest.mark.asyncio
    async def test_garbage_token(self, rsa_key):
        with pytest.raises(InvalidTokenFormat):
            await verify_id_token(StaticKeySource(rsa_key), "not-a-jwt", CLIENT_ID)

    @pytest.mark.asyncio
    async def test_non_string_kid_is_format_error(self, rsa_key):
        token = make_unsigned_token(id_token_claims(), header={"alg": "RS256", "kid": 123})
        key_source = StaticKeySource(rsa_key)

        with pytest.raises(InvalidTokenFormat):
            await verify_id_token(key_source, token, CLIENT_ID)
        assert key_source.calls == 0

    @pytest.mark.asyncio
    async def test_key_for_other_algorithm(self, rsa_key):
        # RS256 header naming an EC key
        token = rsa_key.sign(id_token_claims(), kid="ec-1")

        with pytest.raises(SignatureInvalid):
            await verify_id_token(StaticKeySource(rsa_key, EcKey("ec-1")), token, CLIENT_ID)

    @pytest.mark.asyncio
    async def test_list_audience_containing_client(self, rsa_key):
        token = rsa_key.sign(id_token_claims(aud=[CLIENT_ID, "https://api.example.com"]))

        claims = await verify_id_token(StaticKeySource(rsa_key), token, CLIENT_ID)
        assert claims["aud"] == [CLIENT_ID, "https://api.example.com"]

    @pytest.mark.asyncio
    async def test_list_audience_without_client(self, rsa_key):
        token = rsa_key.sign(id_token_claims(aud=["app-b", "app-c"]))

        with pytest.raises(AudienceMismatch):
            await verify_id_token(StaticKeySource(rsa_key), token, CLIENT_ID)
