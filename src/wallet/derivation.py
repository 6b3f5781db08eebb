"""
Key Derivation - Deterministic Ed25519 key pairs from the master seed.

    key seed = SHA-256(master seed || label || str(index))

The 32-byte digest is used directly as the Ed25519 private seed (RFC 8032),
the same expansion Solana uses for Keypair.fromSeed, so every address is a
plain base58 Ed25519 public key.

Pure functions only: no I/O, no shared state, safe from any thread.
"""

import hashlib
from typing import Optional

import base58
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)


SEED_SIZE = 32
PUBLIC_KEY_SIZE = 32

# Domain labels
SCAN_LABEL = "scan"
SPEND_LABEL = "spend"
STEALTH_LABEL = "stealth"


class StealthKeyPair:
    """
    An Ed25519 key pair derived from the master seed.

    Never persisted: it can always be derived again from (seed, label, index).
    The private half is only handed to a signer when a transaction from this
    address has to be authorized.
    """

    def __init__(self, key_seed: bytes):
        if len(key_seed) != SEED_SIZE:
            raise ValueError(f"Ed25519 seed must be {SEED_SIZE} bytes, got {len(key_seed)}")
        self._key_seed = key_seed
        self._private_key = Ed25519PrivateKey.from_private_bytes(key_seed)
        self._public_key = self._private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    @property
    def public_key(self) -> bytes:
        """Raw 32-byte public key."""
        return self._public_key

    @property
    def address(self) -> str:
        """Base58 public key - the address shared with payers."""
        return encode_address(self._public_key)

    @property
    def secret_key(self) -> bytes:
        """
        64-byte secret key (seed || public key), the layout Solana signers expect.

        WARNING: Handle with extreme care! Only for signing.
        """
        return self._key_seed + self._public_key

    def sign(self, message: str | bytes) -> bytes:
        """Sign a message, returns the 64-byte Ed25519 signature."""
        if isinstance(message, str):
            message = message.encode('utf-8')
        return self._private_key.sign(message)

    def verify(self, signature: bytes, message: str | bytes) -> bool:
        """Check a signature against this key pair's public key."""
        if isinstance(message, str):
            message = message.encode('utf-8')
        try:
            Ed25519PublicKey.from_public_bytes(self._public_key).verify(signature, message)
        except InvalidSignature:
            return False
        return True

    def __eq__(self, other) -> bool:
        if not isinstance(other, StealthKeyPair):
            return NotImplemented
        return self._key_seed == other._key_seed

    def __hash__(self) -> int:
        return hash(self._public_key)

    def __repr__(self) -> str:
        return f"StealthKeyPair(address={self.address!r})"


def derive(seed: bytes, label: str, index: Optional[int] = None) -> StealthKeyPair:
    """
    Derive the key pair for a domain label and optional index.

    Args:
        seed: 32-byte master seed
        label: Domain label ("scan", "spend" or "stealth")
        index: Derivation index, appended as a decimal string when given

    Returns:
        StealthKeyPair, identical for identical inputs
    """
    if len(seed) != SEED_SIZE:
        raise ValueError(f"Master seed must be {SEED_SIZE} bytes, got {len(seed)}")

    data = seed + label.encode('utf-8')
    if index is not None:
        if index < 0:
            raise ValueError(f"Derivation index must be non-negative, got {index}")
        data += str(index).encode('ascii')

    return StealthKeyPair(hashlib.sha256(data).digest())


def derive_stealth_keypair(seed: bytes, index: int) -> StealthKeyPair:
    """One-time receiving key pair at a given index."""
    return derive(seed, STEALTH_LABEL, index)


def derive_meta_keypairs(seed: bytes) -> tuple[StealthKeyPair, StealthKeyPair]:
    """The fixed (scan, spend) key pairs behind the meta-address."""
    return derive(seed, SCAN_LABEL), derive(seed, SPEND_LABEL)


# ============================================
# Address Encoding
# ============================================

def encode_address(public_key: bytes) -> str:
    """Base58-encode a raw public key."""
    return base58.b58encode(public_key).decode('ascii')


def decode_address(address: str) -> bytes:
    """
    Decode a base58 address to its 32 raw bytes.

    Raises: ValueError if the string is not base58 or has the wrong length.
    """
    raw = base58.b58decode(address)
    if len(raw) != PUBLIC_KEY_SIZE:
        raise ValueError(f"Address must decode to {PUBLIC_KEY_SIZE} bytes, got {len(raw)}")
    return raw


def is_valid_address(address: str) -> bool:
    """
    Check that a string is a well-formed public key encoding.

    Says nothing about whether the key was derived by this wallet.
    """
    if not isinstance(address, str) or not address:
        return False
    try:
        decode_address(address)
    except ValueError:
        return False
    return True
