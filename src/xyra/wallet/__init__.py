"""Wallet access for EVM and Solana users.

Provides:
- ConnectedWallet: VM-tagged view of the user's wallet
- EVMProvider: web3.py signer with confirmation polling
- WalletFactory: builds wallets from settings
"""

from xyra.wallet.base import ConnectedWallet, TransactionHandle
from xyra.wallet.evm import EVMProvider
from xyra.wallet.factory import WalletFactory, get_wallet_factory

__all__ = [
    "ConnectedWallet",
    "TransactionHandle",
    "EVMProvider",
    "WalletFactory",
    "get_wallet_factory",
]
