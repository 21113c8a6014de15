"""Address canonicalization.

Turns a human address string into the byte form the settlement contract keys
accounts by:
- EVM: 0x-prefixed hex, 20 bytes (EIP-55 checksum enforced on mixed case)
- Solana: base58, 32-byte public key
"""

import re

import base58
from eth_utils import is_checksum_address

from xyra.errors import InvalidAddress

EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
BASE58_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")

SOLANA_PUBKEY_LENGTH = 32


def is_evm_address(address: str) -> bool:
    """Check for the 0x + 40 hex digit form (casing not checked)."""
    return bool(EVM_ADDRESS_RE.match(address.strip()))


def canonicalize_address(address: str) -> bytes:
    """Normalize an address string into canonical bytes.

    Args:
        address: 0x-prefixed hex or base58 address

    Returns:
        20 bytes for EVM addresses, 32 bytes for Solana public keys

    Raises:
        InvalidAddress: If the string matches neither form
    """
    if not address or not isinstance(address, str):
        raise InvalidAddress(str(address), "address is required")

    address = address.strip()

    if EVM_ADDRESS_RE.match(address):
        body = address[2:]
        mixed_case = body != body.lower() and body != body.upper()
        if mixed_case and not is_checksum_address(address):
            raise InvalidAddress(address, "bad EIP-55 checksum")
        return bytes.fromhex(body)

    if BASE58_ADDRESS_RE.match(address):
        decoded = base58.b58decode(address)
        if len(decoded) != SOLANA_PUBKEY_LENGTH:
            raise InvalidAddress(
                address, f"base58 address decodes to {len(decoded)} bytes, expected 32"
            )
        return decoded

    raise InvalidAddress(address)
