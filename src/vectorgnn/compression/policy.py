from __future__ import annotations

from typing import Optional
import logging

from vectorgnn.compression.tiers import Tier
from vectorgnn.config.settings import PolicyConfig
from vectorgnn.errors import InvalidValue
from vectorgnn.utils.helpers import ensure_finite_scalar


class CompressionPolicy:
    """
    Maps a normalized access frequency onto a storage tier.

    | frequency      | tier   | class   |
    |----------------|--------|---------|
    | > hot (0.8)    | Full   | hot     |
    | > warm (0.4)   | Half   | warm    |
    | > cool (0.1)   | PQ8    | cool    |
    | > cold (0.01)  | PQ4    | cold    |
    | otherwise      | Binary | archive |

    How the frequency is measured is up to the storage layer.
    """

    def __init__(self, config: Optional[PolicyConfig] = None) -> None:
        self.config = config or PolicyConfig()

    def select(self, access_frequency: float) -> Tier:
        freq = ensure_finite_scalar(access_frequency, name="access_frequency")
        if not 0.0 <= freq <= 1.0:
            raise InvalidValue(f"access_frequency must lie in [0, 1], got {freq}")

        cfg = self.config
        if freq > cfg.hot_threshold:
            tier = Tier.FULL
        elif freq > cfg.warm_threshold:
            tier = Tier.HALF
        elif freq > cfg.cool_threshold:
            tier = Tier.PQ8
        elif freq > cfg.cold_threshold:
            tier = Tier.PQ4
        else:
            tier = Tier.BINARY

        logging.getLogger("vectorgnn.policy").debug(
            "access_frequency=%.4f -> %s", freq, tier.value
        )
        return tier

    def classify(self, access_frequency: float) -> str:
        """
        Human-readable temperature class for an access frequency.
        """
        return _CLASSES[self.select(access_frequency)]


_CLASSES = {
    Tier.FULL: "hot",
    Tier.HALF: "warm",
    Tier.PQ8: "cool",
    Tier.PQ4: "cold",
    Tier.BINARY: "archive",
}
