"""Tests for JWT expiry decoding."""

import base64
import json

import pytest

from cab_booking.adapters.auth.claims import decode_expiry


def make_token(payload, header=None):
    def segment(data):
        raw = json.dumps(data).encode() if not isinstance(data, bytes) else data
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()

    return f"{segment(header or {'alg': 'HS256'})}.{segment(payload)}.signature"


class TestDecodeExpiry:
    def test_reads_exp_claim(self):
        assert decode_expiry(make_token({"sub": "*", "exp": 1_900_000_000})) == 1_900_000_000

    def test_float_exp_is_truncated(self):
        assert decode_expiry(make_token({"exp": 1_900_000_000.7})) == 1_900_000_000

    def test_unpadded_payload_is_accepted(self):
        token = make_token({"exp": 1234567890, "x": "ab"})
        assert "=" not in token
        assert decode_expiry(token) == 1234567890

    @pytest.mark.parametrize(
        "payload",
        [
            {"sub": "*"},
            {"exp": "1900000000"},
            {"exp": True},
            {"exp": None},
            {"exp": 0},
            {"exp": -5},
            [1, 2, 3],
        ],
    )
    def test_unusable_claims_return_none(self, payload):
        assert decode_expiry(make_token(payload)) is None

    @pytest.mark.parametrize(
        "token",
        ["", "not-a-jwt", "header.", "header.!!!.sig", "a.bm90IGpzb24.c"],
    )
    def test_malformed_tokens_return_none(self, token):
        assert decode_expiry(token) is None

    def test_non_finite_exp_returns_none(self):
        token = make_token(b'{"exp": Infinity}')
        assert decode_expiry(token) is None
