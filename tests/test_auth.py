"""Tests for password hashing and access tokens."""

from auth import ACCESS_TOKEN_BYTES, generate_access_token, hash_password, verify_password


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("correct-horse")
        assert verify_password("correct-horse", hashed) is True

    def test_wrong_password_rejected(self):
        hashed = hash_password("correct-horse")
        assert verify_password("battery-staple", hashed) is False

    def test_hash_is_salted(self):
        assert hash_password("correct-horse") != hash_password("correct-horse")

    def test_hash_is_bcrypt(self):
        assert hash_password("correct-horse").startswith("$2")

    def test_malformed_hash_does_not_raise(self):
        assert verify_password("correct-horse", "not-a-hash") is False


class TestAccessToken:
    def test_token_is_hex_of_fixed_length(self):
        token = generate_access_token()
        assert len(token) == ACCESS_TOKEN_BYTES * 2
        int(token, 16)

    def test_tokens_are_unique(self):
        assert len({generate_access_token() for _ in range(20)}) == 20
