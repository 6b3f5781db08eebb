"""
Secret Store - Encrypted persistence for the stealth master seed and counter.

Structure:
- Single store file (stealth.store), JSON
- One password protects everything (Argon2id -> AES-256-GCM)
- Named items, each encrypted separately and bound to its name

Only two items belong to the stealth wallet: the master seed and the next
address index. Both names carry the "stealth." prefix so collaborators can
keep their own items (session tokens, etc.) in the same file.
"""

import json
import logging
import secrets
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from cryptography.exceptions import InvalidTag

from .crypto import (
    KdfParams,
    new_salt,
    derive_key,
    encrypt_value,
    decrypt_value,
    set_secure_permissions,
)
from .errors import StoreUnavailable

logger = logging.getLogger(__name__)

STORE_VERSION = 1

MASTER_SEED_KEY = "stealth.master_seed"
ADDRESS_INDEX_KEY = "stealth.address_index"

SEED_SIZE = 32  # bytes

# Encrypted marker used to reject a wrong password before touching any item
_CHECK_AD = b"store-check"
_CHECK_VALUE = "ok"


class EncryptedKeyStore:
    """
    Password-protected key/value file.

    Usage:
        store = EncryptedKeyStore("stealth.store", "password")
        store.set_item("stealth.address_index", "3")
        store.get_item("stealth.address_index")  # "3"

    The file is created on first open. Every write replaces the whole file
    atomically, so a crash never leaves a half-written store behind.
    """

    def __init__(self, path: str | Path, password: str, kdf: Optional[KdfParams] = None):
        self.path = Path(path)
        self._lock = threading.RLock()
        self._items: dict[str, dict] = {}

        if self.path.exists():
            data = self._read_file()
            if data.get("version") != STORE_VERSION:
                raise ValueError(f"Unsupported store version: {data.get('version')}")
            try:
                self._kdf = KdfParams.from_dict(data["kdf"])
                self._salt = bytes.fromhex(data["kdf"]["salt"])
                self._created_at = data.get("created_at", "")
                self._check = data["check"]
                self._items = dict(data.get("items", {}))
            except (KeyError, TypeError, AttributeError, ValueError) as e:
                raise ValueError("Wrong password or corrupted store file") from e
            self._key = derive_key(password, self._salt, self._kdf)
            try:
                self._decrypt_entry(self._check, _CHECK_AD)
            except (InvalidTag, ValueError) as e:
                raise ValueError("Wrong password or corrupted store file") from e
        else:
            self._kdf = kdf or KdfParams()
            self._salt = new_salt()
            self._created_at = datetime.now(timezone.utc).isoformat()
            self._key = derive_key(password, self._salt, self._kdf)
            self._check = self._encrypt_entry(_CHECK_VALUE, _CHECK_AD)
            self._write_file(self._items)
            logger.info(f"Created secret store at {self.path}")

    @staticmethod
    def exists(path: str | Path) -> bool:
        """Check if a store file exists."""
        return Path(path).exists()

    # ============================================
    # Items
    # ============================================

    def keys(self) -> list[str]:
        """Names of all stored items."""
        with self._lock:
            return sorted(self._items)

    def get_item(self, key: str) -> Optional[str]:
        """Decrypted value of an item, or None if it was never set."""
        with self._lock:
            self._require_key()
            entry = self._items.get(key)
            if entry is None:
                return None
            try:
                return self._decrypt_entry(entry, key.encode('utf-8'))
            except (InvalidTag, ValueError, KeyError) as e:
                raise ValueError("Wrong password or corrupted store file") from e

    def set_item(self, key: str, value: str) -> None:
        """Encrypt and persist an item. The in-memory view changes only if the write succeeds."""
        with self._lock:
            items = dict(self._items)
            items[key] = self._encrypt_entry(value, key.encode('utf-8'))
            self._write_file(items)
            self._items = items

    def delete_item(self, key: str) -> None:
        """Remove an item. Missing items are ignored."""
        with self._lock:
            if key not in self._items:
                return
            items = dict(self._items)
            del items[key]
            self._write_file(items)
            self._items = items

    def lock(self) -> None:
        """Clear the derived key from memory. The store is unusable afterwards."""
        with self._lock:
            self._key = None

    # ============================================
    # Internals
    # ============================================

    def _require_key(self) -> bytes:
        if self._key is None:
            raise ValueError("Secret store is locked")
        return self._key

    def _encrypt_entry(self, value: str, associated_data: bytes) -> dict:
        ciphertext, iv, tag = encrypt_value(self._require_key(), value, associated_data)
        return {"ciphertext": ciphertext.hex(), "iv": iv.hex(), "tag": tag.hex()}

    def _decrypt_entry(self, entry: dict, associated_data: bytes) -> str:
        return decrypt_value(
            self._require_key(),
            bytes.fromhex(entry["ciphertext"]),
            bytes.fromhex(entry["iv"]),
            bytes.fromhex(entry["tag"]),
            associated_data,
        )

    def _read_file(self) -> dict:
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreUnavailable(f"Secret store is unreadable: {self.path}") from e
        except OSError as e:
            raise StoreUnavailable(f"Failed to read secret store: {e}") from e
        if not isinstance(data, dict):
            raise StoreUnavailable(f"Secret store is unreadable: {self.path}")
        return data

    def _write_file(self, items: dict) -> None:
        store_data = {
            "version": STORE_VERSION,
            "created_at": self._created_at,
            "kdf": {**self._kdf.to_dict(), "salt": self._salt.hex()},
            "check": self._check,
            "items": items,
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.path.with_suffix('.tmp')
            with open(temp_path, 'w') as f:
                json.dump(store_data, f, indent=2)
            set_secure_permissions(temp_path)
            temp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Failed to write secret store: {e}")
            raise StoreUnavailable(f"Failed to write secret store: {e}") from e


class SecretStore:
    """
    The stealth wallet's view of the encrypted store: master seed and next index.

    The seed is created at most once. Once it exists it is only ever read
    back, never replaced, except through reset().
    """

    def __init__(self, keystore: EncryptedKeyStore):
        self._keystore = keystore
        self._lock = threading.Lock()
        # Every read-modify-write of the address index, whichever ledger asks
        self._index_lock = threading.Lock()

    @classmethod
    def open(cls, path: str | Path, password: str, kdf: Optional[KdfParams] = None) -> "SecretStore":
        """Open (or create) the store file at path."""
        return cls(EncryptedKeyStore(path, password, kdf))

    @property
    def keystore(self) -> EncryptedKeyStore:
        return self._keystore

    def get_or_create_seed(self) -> bytes:
        """Return the master seed, generating and persisting it on first use."""
        with self._lock:
            seed = self._load_seed()
            if seed is not None:
                return seed

            seed = secrets.token_bytes(SEED_SIZE)
            self._keystore.set_item(MASTER_SEED_KEY, seed.hex())
            logger.info("Generated new stealth master seed")
            return seed

    def is_initialized(self) -> bool:
        """Check if a master seed exists."""
        return self._keystore.get_item(MASTER_SEED_KEY) is not None

    def restore_seed(self, seed: bytes) -> None:
        """
        Install a seed recovered from a backup.

        Only allowed on an empty store: replacing a live seed would orphan
        every address already handed out.
        """
        if len(seed) != SEED_SIZE:
            raise ValueError(f"Master seed must be {SEED_SIZE} bytes, got {len(seed)}")
        with self._lock:
            if self._load_seed() is not None:
                raise ValueError("Secret store already holds a master seed")
            self._keystore.set_item(MASTER_SEED_KEY, seed.hex())
            logger.info("Restored stealth master seed from backup")

    def get_index(self) -> int:
        """Next address index to allocate (0 if never set)."""
        value = self._keystore.get_item(ADDRESS_INDEX_KEY)
        if value is None:
            return 0
        try:
            index = int(value, 10)
        except ValueError as e:
            raise ValueError(f"Corrupted address index: {value!r}") from e
        if index < 0:
            raise ValueError(f"Corrupted address index: {value!r}")
        return index

    def set_index(self, index: int) -> None:
        """Persist the next address index."""
        if index < 0:
            raise ValueError(f"Address index must be non-negative, got {index}")
        self._keystore.set_item(ADDRESS_INDEX_KEY, str(index))

    def allocate_index(self) -> int:
        """
        Reserve the next address index.

        Reads the index and persists index + 1 as one step, so callers
        sharing this store never receive the same index.

        Raises:
            StoreUnavailable: if the incremented index could not be persisted
        """
        with self._index_lock:
            index = self.get_index()
            self.set_index(index + 1)
            return index

    def raise_index(self, minimum: int) -> int:
        """Move the index up to at least `minimum`. Returns the index afterwards."""
        with self._index_lock:
            current = self.get_index()
            if minimum > current:
                self.set_index(minimum)
                return minimum
            return current

    def delete_index(self) -> None:
        """Forget the address index. The seed is untouched."""
        with self._index_lock:
            self._keystore.delete_item(ADDRESS_INDEX_KEY)

    def reset(self) -> None:
        """Destroy the master seed and the index. Everything derived is lost."""
        with self._lock, self._index_lock:
            self._keystore.delete_item(ADDRESS_INDEX_KEY)
            self._keystore.delete_item(MASTER_SEED_KEY)
            logger.warning("Stealth secret store reset: master seed destroyed")

    def _load_seed(self) -> Optional[bytes]:
        value = self._keystore.get_item(MASTER_SEED_KEY)
        if value is None:
            return None
        if len(value) != SEED_SIZE * 2:
            raise ValueError("Corrupted master seed in secret store")
        return bytes.fromhex(value)
