"""Tests for settings."""

from xyra.config import Settings

from conftest import POOL, TEST_MNEMONIC, TEST_PRIVATE_KEY


class TestSettings:
    """Tests for Settings."""

    def test_confirmation_defaults(self):
        settings = Settings()

        assert settings.direct_confirmations == 1
        assert settings.relay_confirmations == 3
        assert settings.approval_confirmations == 1

    def test_pool_from_environment(self):
        assert Settings().lending_pool_address == POOL

    def test_rpc_url_lookup(self):
        settings = Settings(sepolia_rpc_url="http://sepolia.local")

        assert settings.get_rpc_url("SEPOLIA") == "http://sepolia.local"
        assert settings.get_rpc_url("nowhere") == ""

    def test_has_wallet(self):
        assert not Settings().has_wallet
        assert Settings(wallet_private_key=TEST_PRIVATE_KEY).has_wallet
        assert Settings(wallet_seed_phrase=TEST_MNEMONIC).has_wallet
        assert not Settings(wallet_seed_phrase="too short").has_wallet

    def test_safe_dict_redacts_secrets(self):
        data = Settings(wallet_private_key=TEST_PRIVATE_KEY).get_safe_dict()

        assert data["wallet_private_key"] == "***"
        assert TEST_PRIVATE_KEY not in str(data)
        assert data["confirmations"]["relay"] == 3
