"""
Stealth address models.

A StealthAddress is the record handed out when a one-time address is
issued. A MetaAddress is the fixed scan/spend public key pair an account
advertises.
"""

from dataclasses import dataclass, asdict
from typing import Optional


# Separator of the canonical shareable meta-address form
META_ADDRESS_SEPARATOR = ":"


@dataclass(frozen=True)
class StealthAddress:
    """A one-time receiving address issued by the ledger."""
    index: int                      # Derivation index
    address: str                    # Base58 public key
    created_at: int                 # Epoch milliseconds, 0 = unknown (re-derived)
    label: Optional[str] = None     # Caller-supplied name, not part of the derivation

    def to_dict(self) -> dict:
        d = asdict(self)
        # Remove None values for cleaner JSON
        return {k: v for k, v in d.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict) -> "StealthAddress":
        index = data.get("index")
        if not isinstance(index, int) or index < 0:
            raise ValueError(f"index must be non-negative integer, got {index}")
        return cls(
            index=index,
            address=data["address"],
            created_at=data.get("created_at", 0),
            label=data.get("label"),
        )


@dataclass(frozen=True)
class MetaAddress:
    """Public scan/spend keys identifying the account. Recomputed, never stored."""
    scan_public_key: str
    spend_public_key: str

    def encode(self) -> str:
        """Canonical shareable form: scan:spend, untruncated."""
        return f"{self.scan_public_key}{META_ADDRESS_SEPARATOR}{self.spend_public_key}"

    @classmethod
    def parse(cls, text: str) -> "MetaAddress":
        """Parse the shareable form back into its two keys."""
        from wallet.derivation import is_valid_address

        parts = text.strip().split(META_ADDRESS_SEPARATOR)
        if len(parts) != 2:
            raise ValueError("Meta-address must be two keys separated by ':'")
        scan, spend = parts
        if not is_valid_address(scan) or not is_valid_address(spend):
            raise ValueError("Meta-address contains an invalid public key")
        return cls(scan_public_key=scan, spend_public_key=spend)

    def to_dict(self) -> dict:
        return asdict(self)
