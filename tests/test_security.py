"""Token signing and verification."""

from pro_directory_api.app.core.security import (
    ROLE_ADMIN,
    ROLE_PROFESSIONAL,
    create_account_token,
    create_admin_token,
    decode_access_token,
)


class TestTokens:
    def test_account_token_round_trip(self):
        claims = decode_access_token(create_account_token(42))

        assert claims["sub"] == "account:42"
        assert claims["role"] == ROLE_PROFESSIONAL
        assert claims["account_id"] == 42

    def test_admin_token(self):
        claims = decode_access_token(create_admin_token("billing-worker"))

        assert claims["sub"] == "billing-worker"
        assert claims["role"] == ROLE_ADMIN

    def test_expired_token_rejected(self):
        assert decode_access_token(create_admin_token(expires_delta=-60)) is None

    def test_tampered_token_rejected(self):
        header, payload, signature = create_account_token(1).split(".")
        forged = create_account_token(2).split(".")[1]

        assert decode_access_token(f"{header}.{forged}.{signature}") is None

    def test_malformed_tokens_rejected(self):
        assert decode_access_token("not-a-token") is None
        assert decode_access_token("a.b.c") is None
        assert decode_access_token("") is None
