"""
Stealth limits model.

Caps on what payment requests and sweeps may move through stealth
addresses while the feature is being tested.
"""

from dataclasses import dataclass, asdict


ASSET_SOL = "SOL"
ASSET_USDC = "USDC"


@dataclass
class StealthLimits:
    """Per-asset caps for payment requests to, and sweeps from, stealth addresses."""
    max_sweep_sol: float = 0.1
    max_sweep_usdc: float = 10.0
    max_request_sol: float = 0.05
    max_request_usdc: float = 5.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON storage."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "StealthLimits":
        """Create from dictionary with input validation."""
        defaults = cls()
        values = {}
        for name, default in asdict(defaults).items():
            value = data.get(name, default)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise ValueError(f"{name} must be a non-negative number, got {value}")
            values[name] = float(value)
        return cls(**values)

    def check_sweep(self, asset: str, amount: float) -> tuple[bool, str]:
        """
        Check if sweeping `amount` of `asset` out of a stealth address is allowed.

        Returns (is_allowed, reason) where reason explains why if not allowed.
        """
        limit = {ASSET_SOL: self.max_sweep_sol, ASSET_USDC: self.max_sweep_usdc}.get(asset.upper())
        return self._check("Sweep", asset, amount, limit)

    def check_request(self, asset: str, amount: float) -> tuple[bool, str]:
        """Check if requesting `amount` of `asset` to a stealth address is allowed."""
        limit = {ASSET_SOL: self.max_request_sol, ASSET_USDC: self.max_request_usdc}.get(asset.upper())
        return self._check("Request", asset, amount, limit)

    def _check(self, kind: str, asset: str, amount: float, limit) -> tuple[bool, str]:
        if limit is None:
            return False, f"Unsupported asset: {asset}"
        if amount <= 0:
            return False, f"{kind} amount must be positive"
        if amount > limit:
            return False, f"{kind} of {amount:g} {asset.upper()} exceeds limit of {limit:g} {asset.upper()}"
        return True, ""
