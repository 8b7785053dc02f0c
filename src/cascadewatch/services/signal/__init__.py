"""Signal processing service."""

from cascadewatch.services.signal.codec import SignalCodec, format_ether, signal_hash
from cascadewatch.services.signal.dedup_cache import DedupCache
from cascadewatch.services.signal.dispatcher import Dispatcher
from cascadewatch.services.signal.royalty import RoyaltyPolicy
from cascadewatch.services.signal.selector_filter import SelectorFilter

__all__ = [
    "DedupCache",
    "Dispatcher",
    "RoyaltyPolicy",
    "SelectorFilter",
    "SignalCodec",
    "format_ether",
    "signal_hash",
]
