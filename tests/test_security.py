"""
Password hashing and token helper tests
"""

import pytest

from shared.utils.security import (
    generate_reset_token,
    generate_session_id,
    hash_password,
    validate_email,
    verify_password,
)


class TestPasswordHashing:

    @pytest.mark.asyncio
    async def test_hash_and_verify(self):
        hashed = await hash_password("hunter2", rounds=4)

        assert hashed != "hunter2"
        assert hashed.startswith("$2b$04$")
        assert await verify_password("hunter2", hashed)
        assert not await verify_password("hunter3", hashed)

    @pytest.mark.asyncio
    async def test_hashes_are_salted(self):
        assert await hash_password("same", rounds=4) != await hash_password("same", rounds=4)

    @pytest.mark.asyncio
    async def test_long_passwords_accepted(self):
        hashed = await hash_password("x" * 100, rounds=4)

        assert await verify_password("x" * 100, hashed)

    @pytest.mark.asyncio
    async def test_malformed_hash(self):
        assert await verify_password("hunter2", "not-a-bcrypt-hash") is False


class TestTokens:

    def test_session_ids_unique(self):
        ids = {generate_session_id() for _ in range(50)}

        assert len(ids) == 50

    def test_reset_tokens_url_safe(self):
        token = generate_reset_token()

        assert len(token) >= 32
        assert "/" not in token and "+" not in token


class TestValidateEmail:

    @pytest.mark.parametrize("email", [
        "bob@example.com",
        "first.last+tag@sub.example.org",
    ])
    def test_valid(self, email):
        assert validate_email(email)

    @pytest.mark.parametrize("email", [
        "",
        "bob",
        "bob@",
        "@example.com",
        "bob@example",
        "bob smith@example.com",
    ])
    def test_invalid(self, email):
        assert not validate_email(email)
