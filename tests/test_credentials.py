"""
Tests for bcrypt credentials.
"""

import pytest

from meetpoll.adapters.credentials import BcryptCredentialService


class TestBcryptCredentialService:
    """Tests for BcryptCredentialService."""

    def test_hash_hides_secret(self, credentials):
        credential = credentials.hash("correct horse")

        assert "correct horse" not in credential
        assert credential.startswith("$2")

    def test_hash_is_salted(self, credentials):
        assert credentials.hash("correct horse") != credentials.hash("correct horse")

    def test_verify_matching_secret(self, credentials):
        credential = credentials.hash("correct horse")

        assert credentials.verify("correct horse", credential)

    def test_verify_wrong_secret(self, credentials):
        credential = credentials.hash("correct horse")

        assert not credentials.verify("battery staple", credential)

    def test_verify_malformed_credential(self, credentials):
        assert not credentials.verify("correct horse", "not-a-bcrypt-hash")

    @pytest.mark.parametrize("rounds", [3, 32])
    def test_rounds_out_of_range(self, rounds):
        with pytest.raises(ValueError, match="between 4 and 31"):
            BcryptCredentialService(rounds=rounds)
