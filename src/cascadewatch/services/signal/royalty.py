"""Royalty policy: maps transaction value to a basis-points tier."""

from cascadewatch.models.signal import RoyaltyDecision, RoyaltyTier
from cascadewatch.models.watcher_config import WatcherConfig


class RoyaltyPolicy:
    """Two-tier royalty: values strictly above the threshold get the large tier."""

    def __init__(self, threshold_wei: int, default_bps: int, large_bps: int) -> None:
        self.threshold_wei = threshold_wei
        self.default_bps = default_bps
        self.large_bps = large_bps

    @classmethod
    def from_config(cls, config: WatcherConfig) -> "RoyaltyPolicy":
        return cls(
            threshold_wei=config.royalty_threshold_wei,
            default_bps=config.default_bps,
            large_bps=config.large_tx_bps,
        )

    def decide(self, value_wei: int) -> RoyaltyDecision:
        """Select the tier for a transaction value (wei)."""
        if value_wei > self.threshold_wei:
            return RoyaltyDecision(tier=RoyaltyTier.LARGE, bps=self.large_bps)
        return RoyaltyDecision(tier=RoyaltyTier.DEFAULT, bps=self.default_bps)
