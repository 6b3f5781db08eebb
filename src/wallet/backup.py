"""
Seed backup - The master seed as a BIP-39 phrase.

32 bytes of seed encode to exactly 24 words, and decode back to the same
bytes, so the phrase is a full backup of every stealth address.
"""

from mnemonic import Mnemonic

from .derivation import SEED_SIZE

BACKUP_WORD_COUNT = 24


def seed_to_phrase(seed: bytes) -> str:
    """
    Encode the master seed as a 24-word phrase.

    WARNING: The phrase is the seed. Only show it during backup!
    """
    if len(seed) != SEED_SIZE:
        raise ValueError(f"Master seed must be {SEED_SIZE} bytes, got {len(seed)}")
    return Mnemonic("english").to_mnemonic(seed)


def phrase_to_seed(phrase: str) -> bytes:
    """
    Decode a backup phrase to the master seed.

    Raises: ValueError if the phrase is not a valid 24-word BIP-39 phrase.
    """
    words = phrase.strip().lower().split()
    if len(words) != BACKUP_WORD_COUNT:
        raise ValueError(f"Backup phrase must have {BACKUP_WORD_COUNT} words, got {len(words)}")

    mnemo = Mnemonic("english")
    normalized = " ".join(words)
    if not mnemo.check(normalized):
        raise ValueError("Invalid backup phrase")

    return bytes(mnemo.to_entropy(normalized))
