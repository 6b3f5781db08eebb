"""
Meta-Address View - The account's shareable scan/spend public keys.
"""

from models.address import MetaAddress
from .derivation import SEED_SIZE, derive_meta_keypairs, is_valid_address

# Characters kept on each side when shortening a key for display
SHORT_CHARS = 4


class MetaAddressView:
    """Derives the meta-address from the master seed on demand."""

    def __init__(self, seed: bytes):
        if len(seed) != SEED_SIZE:
            raise ValueError(f"Master seed must be {SEED_SIZE} bytes, got {len(seed)}")
        self._seed = seed

    def get_meta_address(self) -> MetaAddress:
        scan, spend = derive_meta_keypairs(self._seed)
        return MetaAddress(scan_public_key=scan.address, spend_public_key=spend.address)


def shorten(key: str, chars: int = SHORT_CHARS) -> str:
    """abcd...wxyz"""
    if len(key) <= chars * 2:
        return key
    return f"{key[:chars]}...{key[-chars:]}"


def format_short(meta_address: MetaAddress, chars: int = SHORT_CHARS) -> str:
    """
    Truncated display form, e.g. "FyDa...CyDB:Cv6C...dMS6".

    For display only. Share MetaAddress.encode() instead.
    """
    return f"{shorten(meta_address.scan_public_key, chars)}:{shorten(meta_address.spend_public_key, chars)}"


__all__ = ["MetaAddressView", "format_short", "shorten", "is_valid_address"]
