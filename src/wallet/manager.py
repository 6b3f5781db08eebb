"""
Stealth Wallet Manager - Ties the secret store, ledger and meta-address together.

Opening a wallet is the one place the master seed gets created: the seed is
loaded (or generated) once, then injected into the ledger and meta view.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from models.address import MetaAddress, StealthAddress
from .backup import seed_to_phrase, phrase_to_seed
from .crypto import KdfParams
from .derivation import StealthKeyPair
from .ledger import AddressLedger, DEFAULT_GAP_LIMIT
from .meta import MetaAddressView, format_short
from .store import EncryptedKeyStore, SecretStore

logger = logging.getLogger(__name__)


class StealthWallet:
    """
    Stealth address wallet backed by one encrypted store file.

    Usage:
        # Open (creates the store and seed on first use)
        wallet = StealthWallet.open("stealth.store", "password")

        addr = wallet.generate_address("Coffee")
        meta = wallet.get_meta_address()

        # Later, to sweep funds
        keypair = wallet.get_keypair(addr.address, addr.index)
    """

    def __init__(self, store: SecretStore):
        """Initialize from an open store (internal use - use open() or restore())."""
        self._store = store
        self._seed = store.get_or_create_seed()
        self.ledger = AddressLedger(store, self._seed)
        self.meta = MetaAddressView(self._seed)

    @classmethod
    def open(cls, path: str | Path, password: str,
             kdf: Optional[KdfParams] = None) -> "StealthWallet":
        """
        Open a wallet store, creating it if it doesn't exist.

        Raises:
            StoreUnavailable: If the store file can't be read or written
            ValueError: If password is wrong or the file is corrupted
        """
        store = SecretStore.open(path, password, kdf)
        return cls(store)

    @classmethod
    def restore(cls, path: str | Path, password: str, phrase: str,
                kdf: Optional[KdfParams] = None) -> "StealthWallet":
        """
        Create a wallet store from a backup phrase.

        The address counter starts at 0; use recover_watermark() to skip
        past addresses that were already handed out.
        """
        seed = phrase_to_seed(phrase)
        if EncryptedKeyStore.exists(path):
            raise ValueError(f"Store '{path}' already exists")

        store = SecretStore.open(path, password, kdf)
        store.restore_seed(seed)
        logger.info(f"Restored stealth wallet into {path}")
        return cls(store)

    @property
    def store(self) -> SecretStore:
        return self._store

    # ============================================
    # Addresses
    # ============================================

    def generate_address(self, label: Optional[str] = None) -> StealthAddress:
        """Issue a new one-time receiving address."""
        self._require_unlocked()
        return self.ledger.generate(label)

    def list_addresses(self) -> list[StealthAddress]:
        """All issued addresses, oldest first."""
        self._require_unlocked()
        return self.ledger.list_all()

    def get_keypair(self, address: str, index: int) -> Optional[StealthKeyPair]:
        """Key pair for a previously issued address, or None if it doesn't match."""
        self._require_unlocked()
        return self.ledger.recover_keypair(address, index)

    def recover_watermark(self, is_used: Callable[[str], bool],
                          gap_limit: int = DEFAULT_GAP_LIMIT) -> int:
        """Raise the address counter past every address seen in use."""
        self._require_unlocked()
        return self.ledger.recover_watermark(is_used, gap_limit)

    # ============================================
    # Meta-address
    # ============================================

    def get_meta_address(self) -> MetaAddress:
        self._require_unlocked()
        return self.meta.get_meta_address()

    def format_meta_address(self) -> str:
        """Short display form of this wallet's meta-address."""
        return format_short(self.get_meta_address())

    # ============================================
    # Backup
    # ============================================

    def backup_phrase(self) -> str:
        """The master seed as a 24-word phrase (sensitive - only show during backup!)."""
        self._require_unlocked()
        return seed_to_phrase(self._seed)

    # ============================================
    # Security: Memory Cleanup
    # ============================================

    def lock(self) -> None:
        """
        Lock the wallet, clearing the seed and store key from memory.

        After locking, the wallet cannot derive until reopened; every
        operation raises ValueError.
        """
        self._store.keystore.lock()
        self._seed = None
        self.ledger = None
        self.meta = None

    def _require_unlocked(self) -> None:
        if self._seed is None:
            raise ValueError("Wallet is locked")
