"""Unit tests for auth/tokens.py -- identity token issuance and validation.

Covers:
- issue -> validate round trip returns the subject
- the default lifetime window: valid before expiry, expired at and after it
- a token signed with one secret fails under another
- malformed input, "none"/asymmetric algorithms, and bad claims are rejected
  with the matching TokenError subclass
- other HMAC algorithms signed with the right secret are accepted
"""

import base64
import json
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.errors import TokenBadSignature, TokenError, TokenExpired, TokenMalformed, TokenWrongAlgorithm
from auth.tokens import AUTH_COOKIE_NAME, TokenClaims, create_access_token, set_auth_cookie, validate_access_token

SECRET = "unit-test-secret-key-0123456789abcdef"
OTHER_SECRET = "another-secret-key-0123456789abcdef!!"
ISSUED = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _forge(header: dict, payload: dict, signature: str = "") -> str:
    return f"{_b64(header)}.{_b64(payload)}.{signature}"


# ---------------------------------------------------------------------------
# Issue / validate
# ---------------------------------------------------------------------------


class TestRoundTrip:
    @pytest.mark.parametrize("user_id", [1, 42, 2**53, 2**63 - 1])
    def test_subject_survives_round_trip(self, user_id: int) -> None:
        token = create_access_token(SECRET, user_id, 60)
        claims = validate_access_token(token, SECRET)
        assert claims.subject_id == user_id

    def test_claims_are_a_fixed_record(self) -> None:
        token = create_access_token(SECRET, 7, 60, now=ISSUED)
        claims = validate_access_token(token, SECRET, now=ISSUED)
        assert claims == TokenClaims(subject_id=7, expires_at=ISSUED + timedelta(seconds=60))

    def test_payload_carries_only_subject_and_expiry(self) -> None:
        token = create_access_token(SECRET, 7, 60, now=ISSUED)
        payload = jwt.get_unverified_claims(token)
        assert payload == {"sub": "7", "exp": int((ISSUED + timedelta(seconds=60)).timestamp())}

    def test_signed_with_hs256(self) -> None:
        token = create_access_token(SECRET, 7, 60)
        assert jwt.get_unverified_header(token)["alg"] == "HS256"


class TestExpiry:
    def test_valid_just_before_expiry(self) -> None:
        token = create_access_token(SECRET, 7, 60, now=ISSUED)
        claims = validate_access_token(token, SECRET, now=ISSUED + timedelta(seconds=59))
        assert claims.subject_id == 7

    def test_expired_at_expiry_instant(self) -> None:
        token = create_access_token(SECRET, 7, 60, now=ISSUED)
        with pytest.raises(TokenExpired):
            validate_access_token(token, SECRET, now=ISSUED + timedelta(seconds=60))

    def test_expired_after_expiry(self) -> None:
        token = create_access_token(SECRET, 7, 60, now=ISSUED)
        with pytest.raises(TokenExpired):
            validate_access_token(token, SECRET, now=ISSUED + timedelta(hours=1))

    def test_expired_against_wall_clock(self) -> None:
        """Without an explicit now, validation uses the current time."""
        token = create_access_token(SECRET, 7, 60, now=datetime.now(timezone.utc) - timedelta(minutes=2))
        with pytest.raises(TokenExpired):
            validate_access_token(token, SECRET)

    def test_fractional_issue_time_rounds_expiry_up(self) -> None:
        """A sub-second issue time must not shorten the lifetime."""
        issued = ISSUED + timedelta(microseconds=500_000)
        token = create_access_token(SECRET, 7, 60, now=issued)
        claims = validate_access_token(token, SECRET, now=issued + timedelta(seconds=60) - timedelta(microseconds=1))
        assert claims.expires_at == ISSUED + timedelta(seconds=61)


class TestSignature:
    def test_wrong_secret_rejected(self) -> None:
        token = create_access_token(SECRET, 7, 60)
        with pytest.raises(TokenBadSignature):
            validate_access_token(token, OTHER_SECRET)

    def test_tampered_payload_rejected(self) -> None:
        token = create_access_token(SECRET, 7, 60)
        header, _payload, signature = token.split(".")
        exp = int((datetime.now(timezone.utc) + timedelta(minutes=1)).timestamp())
        forged = f"{header}.{_b64({'sub': '1', 'exp': exp})}.{signature}"
        with pytest.raises(TokenBadSignature):
            validate_access_token(forged, SECRET)

    @pytest.mark.parametrize("alg", ["HS384", "HS512"])
    def test_other_hmac_algorithms_accepted(self, alg: str) -> None:
        exp = int((datetime.now(timezone.utc) + timedelta(minutes=1)).timestamp())
        token = jwt.encode({"sub": "9", "exp": exp}, SECRET, algorithm=alg)
        assert validate_access_token(token, SECRET).subject_id == 9


class TestRejection:
    @pytest.mark.parametrize("token", ["", "garbage", "a.b", "a.b.c", "...."])
    def test_malformed_token(self, token: str) -> None:
        with pytest.raises(TokenMalformed):
            validate_access_token(token, SECRET)

    def test_none_algorithm_rejected(self) -> None:
        exp = int((datetime.now(timezone.utc) + timedelta(minutes=1)).timestamp())
        token = _forge({"alg": "none", "typ": "JWT"}, {"sub": "7", "exp": exp})
        with pytest.raises(TokenWrongAlgorithm):
            validate_access_token(token, SECRET)

    def test_asymmetric_algorithm_rejected(self) -> None:
        exp = int((datetime.now(timezone.utc) + timedelta(minutes=1)).timestamp())
        token = _forge({"alg": "RS256", "typ": "JWT"}, {"sub": "7", "exp": exp}, signature="c2ln")
        with pytest.raises(TokenWrongAlgorithm):
            validate_access_token(token, SECRET)

    def test_non_integer_subject_rejected(self) -> None:
        exp = int((datetime.now(timezone.utc) + timedelta(minutes=1)).timestamp())
        token = jwt.encode({"sub": "alice", "exp": exp}, SECRET, algorithm="HS256")
        with pytest.raises(TokenMalformed):
            validate_access_token(token, SECRET)

    @pytest.mark.parametrize("sub", ["9" * 30, str(2**63), str(-(2**63) - 1)])
    def test_subject_outside_int64_rejected(self, sub: str) -> None:
        exp = int((datetime.now(timezone.utc) + timedelta(minutes=1)).timestamp())
        token = jwt.encode({"sub": sub, "exp": exp}, SECRET, algorithm="HS256")
        with pytest.raises(TokenMalformed):
            validate_access_token(token, SECRET)

    def test_missing_expiry_rejected(self) -> None:
        token = jwt.encode({"sub": "7"}, SECRET, algorithm="HS256")
        with pytest.raises(TokenMalformed):
            validate_access_token(token, SECRET)

    def test_missing_subject_rejected(self) -> None:
        exp = int((datetime.now(timezone.utc) + timedelta(minutes=1)).timestamp())
        token = jwt.encode({"exp": exp}, SECRET, algorithm="HS256")
        with pytest.raises(TokenMalformed):
            validate_access_token(token, SECRET)

    def test_all_failures_share_a_base_class(self) -> None:
        for exc in (TokenMalformed, TokenWrongAlgorithm, TokenBadSignature, TokenExpired):
            assert issubclass(exc, TokenError)


class TestAuthCookie:
    def test_cookie_carries_token_and_lifetime(self) -> None:
        from fastapi.responses import JSONResponse

        resp = JSONResponse(content={})
        set_auth_cookie(resp, "tok123", max_age=60)
        header = resp.headers["set-cookie"]
        assert header.startswith(f"{AUTH_COOKIE_NAME}=tok123")
        assert "Max-Age=60" in header
        assert "HttpOnly" in header
        assert "Secure" not in header
