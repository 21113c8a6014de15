"""Wallet factory: builds providers and connected wallets from settings.

The signing key comes from WALLET_PRIVATE_KEY, or is derived from
WALLET_SEED_PHRASE on the standard paths:
- EVM: m/44'/60'/0'/0/{index}
- Solana: m/44'/501'/{index}'/0'
"""

import logging
from typing import Optional, Union

from xyra.chains import VmKind, get_chain
from xyra.config import Settings, get_settings
from xyra.wallet.base import ConnectedWallet
from xyra.wallet.evm import EVMProvider

logger = logging.getLogger(__name__)


class WalletFactory:
    """Factory for chain-specific wallets."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def _evm_private_key(self) -> Union[bytes, str]:
        if self.settings.wallet_private_key:
            return self.settings.wallet_private_key
        if not self.settings.wallet_seed_phrase:
            raise ValueError("WALLET_PRIVATE_KEY or WALLET_SEED_PHRASE not configured")

        from bip_utils import Bip39SeedGenerator, Bip44, Bip44Changes, Bip44Coins

        seed = Bip39SeedGenerator(self.settings.wallet_seed_phrase).Generate()
        bip44 = Bip44.FromSeed(seed, Bip44Coins.ETHEREUM)
        account = bip44.Purpose().Coin().Account(0).Change(Bip44Changes.CHAIN_EXT)
        return account.AddressIndex(self.settings.wallet_index).PrivateKey().Raw().ToBytes()

    def solana_address(self) -> str:
        """Derive the Solana address for the configured seed phrase."""
        if not self.settings.wallet_seed_phrase:
            raise ValueError("WALLET_SEED_PHRASE not configured")

        from bip_utils import Bip39SeedGenerator, Bip44, Bip44Changes, Bip44Coins
        from solders.keypair import Keypair

        seed = Bip39SeedGenerator(self.settings.wallet_seed_phrase).Generate()
        bip44 = Bip44.FromSeed(seed, Bip44Coins.SOLANA)
        account = bip44.Purpose().Coin().Account(self.settings.wallet_index).Change(Bip44Changes.CHAIN_EXT)
        private_key = account.PrivateKey().Raw().ToBytes()
        return str(Keypair.from_seed(private_key[:32]).pubkey())

    def evm_provider(self, chain_key: str) -> EVMProvider:
        """Signing provider for an EVM chain in the registry."""
        chain = get_chain(chain_key)
        if chain.vm_kind is not VmKind.EVM:
            raise ValueError(f"{chain.label} is not an EVM chain")
        return EVMProvider(
            self.settings.get_rpc_url(chain.key),
            self._evm_private_key(),
            poll_interval=self.settings.confirmation_poll_interval,
        )

    def read_only_provider(self, chain_key: str) -> EVMProvider:
        """Provider without a key, for views and allowance reads."""
        chain = get_chain(chain_key)
        if chain.vm_kind is not VmKind.EVM:
            raise ValueError(f"{chain.label} is not an EVM chain")
        return EVMProvider(
            self.settings.get_rpc_url(chain.key),
            poll_interval=self.settings.confirmation_poll_interval,
        )

    def connect(self, chain_key: str, solana_address: Optional[str] = None) -> ConnectedWallet:
        """Connect a wallet on the given chain."""
        chain = get_chain(chain_key)
        if chain.vm_kind is VmKind.SVM:
            address = solana_address or self.solana_address()
            return ConnectedWallet.from_solana(address, chain.key)

        wallet = ConnectedWallet.from_evm(self.evm_provider(chain.key))
        logger.info(f"Connected {wallet.address} on {chain.label}")
        return wallet


# Singleton factory
_wallet_factory: Optional[WalletFactory] = None


def get_wallet_factory() -> WalletFactory:
    """Get or create wallet factory."""
    global _wallet_factory
    if _wallet_factory is None:
        _wallet_factory = WalletFactory()
    return _wallet_factory
