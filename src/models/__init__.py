"""
Models package - Data models for the stealth wallet.

Contains:
- StealthAddress: An issued one-time address
- MetaAddress: The account's scan/spend public keys
- StealthLimits: Request and sweep caps
"""

from .address import StealthAddress, MetaAddress, META_ADDRESS_SEPARATOR
from .policy import StealthLimits, ASSET_SOL, ASSET_USDC

__all__ = [
    "StealthAddress",
    "MetaAddress",
    "META_ADDRESS_SEPARATOR",
    "StealthLimits",
    "ASSET_SOL",
    "ASSET_USDC",
]
