"""
Address Ledger - Issues, lists and recovers one-time stealth addresses.

The ledger owns the "next index" counter kept in the secret store. Every
issued address has a unique index below that counter, and the counter never
goes down unless a reset is explicitly acknowledged.
"""

import logging
import time
from typing import Callable, Optional

from models.address import StealthAddress
from .derivation import SEED_SIZE, StealthKeyPair, derive_stealth_keypair, is_valid_address
from .errors import CounterResetRefused
from .store import SecretStore

logger = logging.getLogger(__name__)

# Consecutive unused addresses after which watermark recovery stops looking
DEFAULT_GAP_LIMIT = 20


class AddressLedger:
    """
    Stealth address bookkeeping for one master seed.

    Usage:
        ledger = AddressLedger(store, store.get_or_create_seed())
        addr = ledger.generate("Invoice 42")
        keypair = ledger.recover_keypair(addr.address, addr.index)
    """

    def __init__(self, store: SecretStore, seed: bytes):
        if len(seed) != SEED_SIZE:
            raise ValueError(f"Master seed must be {SEED_SIZE} bytes, got {len(seed)}")
        self._store = store
        self._seed = seed

    @property
    def next_index(self) -> int:
        """Index the next generate() call will use."""
        return self._store.get_index()

    def generate(self, label: Optional[str] = None) -> StealthAddress:
        """
        Issue a new one-time address.

        The incremented counter is persisted before the address is derived,
        so a failed or abandoned call can only skip an index, never repeat one.

        Raises:
            StoreUnavailable: if the counter could not be persisted
        """
        index = self._store.allocate_index()

        keypair = derive_stealth_keypair(self._seed, index)
        logger.info(f"Issued stealth address #{index}: {keypair.address}")

        return StealthAddress(
            index=index,
            address=keypair.address,
            created_at=int(time.time() * 1000),
            label=label,
        )

    def list_all(self) -> list[StealthAddress]:
        """
        All issued addresses in ascending index order.

        Addresses are derived again rather than read back, so creation time
        and label are unknown (0 and None).
        """
        count = self._store.get_index()
        return [
            StealthAddress(
                index=i,
                address=derive_stealth_keypair(self._seed, i).address,
                created_at=0,
            )
            for i in range(count)
        ]

    def recover_keypair(self, address: str, index: int) -> Optional[StealthKeyPair]:
        """
        Key pair for sweeping funds from a known address.

        Returns None when the key pair at `index` does not belong to
        `address` (stale or wrong index, foreign address).
        """
        if index < 0 or not is_valid_address(address):
            return None

        keypair = derive_stealth_keypair(self._seed, index)
        if keypair.address != address:
            logger.debug(f"Stealth address mismatch at index {index}")
            return None
        return keypair

    def find_index(self, address: str, limit: Optional[int] = None) -> Optional[int]:
        """
        Recognize one of our addresses by replaying derivation from index 0.

        Args:
            address: Base58 address to look for
            limit: Number of indices to try (default: all issued ones)

        Returns:
            The index of the address, or None if it is not ours within the limit
        """
        if not is_valid_address(address):
            return None
        if limit is None:
            limit = self._store.get_index()

        for i in range(limit):
            if derive_stealth_keypair(self._seed, i).address == address:
                return i
        return None

    def recover_watermark(self, is_used: Callable[[str], bool],
                          gap_limit: int = DEFAULT_GAP_LIMIT) -> int:
        """
        Rebuild the counter after it was lost, from observed address activity.

        Walks indices from 0 and asks `is_used` (typically "has this address
        seen an on-chain transaction") about each address, stopping after
        `gap_limit` consecutive unused ones. The counter is raised to one past
        the highest used index; it is never lowered.

        Returns:
            The counter after recovery
        """
        if gap_limit <= 0:
            raise ValueError(f"gap_limit must be positive, got {gap_limit}")

        highest_used = -1
        gap = 0
        i = 0
        while gap < gap_limit:
            address = derive_stealth_keypair(self._seed, i).address
            if is_used(address):
                highest_used = i
                gap = 0
            else:
                gap += 1
            i += 1

        before = self._store.get_index()
        after = self._store.raise_index(highest_used + 1)
        if after > before:
            logger.warning(f"Stealth address counter raised from {before} to {after} from observed activity")
        return after

    def reset_counter(self, acknowledge_reuse: bool = False) -> None:
        """
        Forget the address counter. The seed is kept.

        Afterwards generate() starts again at index 0 and hands out addresses
        that may already have been given to someone. Refused unless the
        caller explicitly acknowledges that.
        """
        if not acknowledge_reuse:
            raise CounterResetRefused(
                "Resetting the stealth address counter reuses issued addresses; "
                "pass acknowledge_reuse=True to proceed"
            )
        self._store.delete_index()
        logger.warning("Stealth address counter reset - earlier addresses will be reissued")
