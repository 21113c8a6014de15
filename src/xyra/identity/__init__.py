"""Address canonicalization and universal identity derivation."""

from xyra.identity.address import canonicalize_address, is_evm_address
from xyra.identity.universal import UniversalIdentity, compute_user_id

__all__ = [
    "canonicalize_address",
    "is_evm_address",
    "UniversalIdentity",
    "compute_user_id",
]
