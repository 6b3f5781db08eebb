"""
Wallet Crypto - Encryption at rest for stealth secrets.

Industry-standard security:
- Argon2id key derivation (memory-hard)
- AES-256-GCM authenticated encryption

Secrets never exist unencrypted on disk.
"""

import os
import secrets
from dataclasses import dataclass, asdict
from pathlib import Path

# Cryptography
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from argon2.low_level import hash_secret_raw, Type


# ============================================
# Security Constants
# ============================================

# Argon2id parameters (OWASP recommendations for high-security)
ARGON2_TIME_COST = 3
ARGON2_MEMORY_COST = 65536  # 64 MB
ARGON2_PARALLELISM = 4
ARGON2_HASH_LEN = 32  # 256 bits for AES-256
ARGON2_SALT_SIZE = 16

# AES-GCM constants
AES_KEY_SIZE = 32
AES_IV_SIZE = 12  # 96 bits (recommended for GCM)
AES_TAG_SIZE = 16

# Secure file permissions (Unix only)
SECURE_FILE_MODE = 0o600  # Owner read/write only


def set_secure_permissions(filepath: Path) -> None:
    """
    Set restrictive file permissions on Unix systems.

    Sets file to mode 0600 (owner read/write only) so no other account on
    the device can read the store. No-op on Windows.
    """
    if os.name == 'posix':
        try:
            os.chmod(filepath, SECURE_FILE_MODE)
        except OSError:
            # Best effort - the content is encrypted either way
            pass


# ============================================
# Key Derivation
# ============================================

@dataclass(frozen=True)
class KdfParams:
    """Argon2id cost parameters, stored alongside the salt in the store header."""
    time_cost: int = ARGON2_TIME_COST
    memory_cost: int = ARGON2_MEMORY_COST
    parallelism: int = ARGON2_PARALLELISM

    def to_dict(self) -> dict:
        return {"algorithm": "argon2id", **asdict(self)}

    @classmethod
    def from_dict(cls, data: dict) -> "KdfParams":
        algorithm = data.get("algorithm", "argon2id")
        if algorithm != "argon2id":
            raise ValueError(f"Unsupported KDF algorithm: {algorithm}")
        params = cls(
            time_cost=data.get("time_cost", ARGON2_TIME_COST),
            memory_cost=data.get("memory_cost", ARGON2_MEMORY_COST),
            parallelism=data.get("parallelism", ARGON2_PARALLELISM),
        )
        for name, value in asdict(params).items():
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value}")
        return params


def new_salt() -> bytes:
    """Fresh random salt for a new store."""
    return secrets.token_bytes(ARGON2_SALT_SIZE)


def derive_key(password: str, salt: bytes, params: KdfParams = KdfParams()) -> bytes:
    """
    Derive an encryption key from password using Argon2id.

    Argon2id is memory-hard, making brute-force attacks expensive.
    With the default parameters, each password guess requires ~64MB RAM.
    """
    return hash_secret_raw(
        secret=password.encode('utf-8'),
        salt=salt,
        time_cost=params.time_cost,
        memory_cost=params.memory_cost,
        parallelism=params.parallelism,
        hash_len=ARGON2_HASH_LEN,
        type=Type.ID
    )


# ============================================
# Encryption
# ============================================

def encrypt_value(key: bytes, plaintext: str, associated_data: bytes = None) -> tuple[bytes, bytes, bytes]:
    """
    Encrypt a value with an already-derived key.

    The associated data binds the ciphertext to its item name, so a value
    cannot be moved to another key inside the file unnoticed.

    Returns: (ciphertext, iv, tag)
    """
    iv = secrets.token_bytes(AES_IV_SIZE)

    aesgcm = AESGCM(key)
    ciphertext_and_tag = aesgcm.encrypt(iv, plaintext.encode('utf-8'), associated_data)

    ciphertext = ciphertext_and_tag[:-AES_TAG_SIZE]
    tag = ciphertext_and_tag[-AES_TAG_SIZE:]

    return ciphertext, iv, tag


def decrypt_value(key: bytes, ciphertext: bytes, iv: bytes, tag: bytes,
                  associated_data: bytes = None) -> str:
    """
    Decrypt a value with an already-derived key.

    Raises: InvalidTag if the key is wrong or data is tampered.
    """
    aesgcm = AESGCM(key)
    plaintext = aesgcm.decrypt(iv, ciphertext + tag, associated_data)

    return plaintext.decode('utf-8')
