"""Tests for wallet construction from settings."""

import pytest

from xyra.chains import VmKind
from xyra.config import Settings
from xyra.identity import canonicalize_address
from xyra.wallet import ConnectedWallet, WalletFactory

from conftest import POOL, SOLANA_ADDRESS, TEST_MNEMONIC


class TestWalletFactory:
    """Tests for WalletFactory."""

    def test_evm_provider_uses_chain_rpc(self, settings):
        provider = WalletFactory(settings).evm_provider("base_sepolia")

        assert provider.rpc_url == settings.base_sepolia_rpc_url
        assert provider.can_sign

    def test_evm_provider_rejects_svm_chain(self, settings):
        with pytest.raises(ValueError):
            WalletFactory(settings).evm_provider("solana_devnet")

    def test_missing_key(self):
        factory = WalletFactory(Settings(lending_pool_address=POOL))
        with pytest.raises(ValueError):
            factory.evm_provider("sepolia")

    def test_read_only_provider(self):
        provider = WalletFactory(Settings(lending_pool_address=POOL)).read_only_provider("zeta_testnet")
        assert not provider.can_sign

    def test_read_only_provider_rejects_svm_chain(self):
        """Test a Solana chain never gets a web3 provider pointed at its RPC."""
        factory = WalletFactory(Settings(lending_pool_address=POOL))
        with pytest.raises(ValueError, match="not an EVM chain"):
            factory.read_only_provider("solana_devnet")

    def test_seed_phrase_derivation(self):
        """Test the standard BIP-44 Ethereum path is used."""
        factory = WalletFactory(Settings(wallet_seed_phrase=TEST_MNEMONIC))
        provider = factory.evm_provider("sepolia")

        assert provider.address == "0x9858EfFD232B4033E47d90003D41EC34EcaEda94"

    def test_solana_address_from_seed(self):
        factory = WalletFactory(Settings(wallet_seed_phrase=TEST_MNEMONIC))
        address = factory.solana_address()

        assert len(canonicalize_address(address)) == 32

    def test_connect_evm(self, settings):
        wallet = WalletFactory(settings).connect("sepolia")

        assert wallet.vm_kind is VmKind.EVM
        assert wallet.evm is not None
        assert wallet.address == wallet.evm.address

    @pytest.mark.asyncio
    async def test_connect_solana(self, settings):
        wallet = WalletFactory(settings).connect("solana_devnet", solana_address=SOLANA_ADDRESS)

        assert wallet.vm_kind is VmKind.SVM
        assert wallet.evm is None
        assert await wallet.current_chain_id() == 901

    @pytest.mark.asyncio
    async def test_solana_wallet_needs_cluster(self):
        wallet = ConnectedWallet(vm_kind=VmKind.SVM, address=SOLANA_ADDRESS)
        with pytest.raises(ValueError):
            await wallet.current_chain_id()
