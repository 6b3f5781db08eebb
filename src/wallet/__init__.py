"""
Wallet package - Stealth address key management.

Contains:
- SecretStore, EncryptedKeyStore: Encrypted persistence of seed and counter
- derive, StealthKeyPair: Deterministic Ed25519 key derivation
- AddressLedger: Issuing, listing and recovering one-time addresses
- MetaAddressView: Shareable scan/spend public keys
- StealthWallet: Everything above behind one object
"""

from .crypto import KdfParams
from .errors import StealthError, StoreUnavailable, CounterResetRefused
from .store import (
    EncryptedKeyStore,
    SecretStore,
    MASTER_SEED_KEY,
    ADDRESS_INDEX_KEY,
)
from .derivation import (
    StealthKeyPair,
    derive,
    derive_stealth_keypair,
    derive_meta_keypairs,
    is_valid_address,
    SCAN_LABEL,
    SPEND_LABEL,
    STEALTH_LABEL,
)
from .ledger import AddressLedger
from .meta import MetaAddressView, format_short
from .backup import seed_to_phrase, phrase_to_seed
from .manager import StealthWallet

__all__ = [
    # Crypto
    "KdfParams",
    # Errors
    "StealthError",
    "StoreUnavailable",
    "CounterResetRefused",
    # Store
    "EncryptedKeyStore",
    "SecretStore",
    "MASTER_SEED_KEY",
    "ADDRESS_INDEX_KEY",
    # Derivation
    "StealthKeyPair",
    "derive",
    "derive_stealth_keypair",
    "derive_meta_keypairs",
    "is_valid_address",
    "SCAN_LABEL",
    "SPEND_LABEL",
    "STEALTH_LABEL",
    # Ledger / meta
    "AddressLedger",
    "MetaAddressView",
    "format_short",
    # Backup
    "seed_to_phrase",
    "phrase_to_seed",
    # Manager
    "StealthWallet",
]
