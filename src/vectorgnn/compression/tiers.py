from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union

from vectorgnn.config.settings import CodecConfig
from vectorgnn.errors import InvalidConfig

AUTO = "auto"


class Tier(str, Enum):
    """
    Storage fidelity tiers, ordered from most to least faithful.
    """

    FULL = "full"
    HALF = "half"
    PQ8 = "pq8"
    PQ4 = "pq4"
    BINARY = "binary"

    @property
    def code(self) -> int:
        """Stable one-byte identifier used in the serialized format."""
        return _TIER_CODES[self]

    @property
    def fidelity_rank(self) -> int:
        """0 for the most faithful tier, increasing as fidelity drops."""
        return _TIER_CODES[self]

    @property
    def is_product_quantized(self) -> bool:
        return self in (Tier.PQ8, Tier.PQ4)

    @classmethod
    def from_code(cls, code: int) -> "Tier":
        for tier, value in _TIER_CODES.items():
            if value == code:
                return tier
        raise InvalidConfig(f"unknown tier code {code}")

    @classmethod
    def parse(cls, value: Union[str, "Tier"]) -> "Tier":
        """
        Parse an externally supplied tier name.

        ``"none"`` is accepted as an alias for full precision.
        """
        if isinstance(value, Tier):
            return value

        name = str(value).strip().lower()
        if name == "none":
            return Tier.FULL
        try:
            return cls(name)
        except ValueError as exc:
            raise InvalidConfig(
                f"unknown compression tier {value!r}; expected one of "
                f"{[t.value for t in Tier]} or {AUTO!r}"
            ) from exc


_TIER_CODES: Dict[Tier, int] = {
    Tier.FULL: 0,
    Tier.HALF: 1,
    Tier.PQ8: 2,
    Tier.PQ4: 3,
    Tier.BINARY: 4,
}

_CODE_BITS: Dict[Tier, int] = {
    Tier.PQ8: 8,
    Tier.PQ4: 4,
}


@dataclass(frozen=True)
class CompressionLevel:
    """
    A tier together with the codec parameters it needs.

    Only the product-quantized tiers carry ``subvectors``, ``centroids``
    and ``codebook_seed``; the others leave them at 0.
    """

    tier: Tier
    subvectors: int = 0
    centroids: int = 0
    codebook_seed: int = 0

    def __post_init__(self) -> None:
        if not self.tier.is_product_quantized:
            if self.subvectors or self.centroids or self.codebook_seed:
                raise InvalidConfig(f"{self.tier.value} takes no quantizer parameters")
            return

        if self.subvectors <= 0:
            raise InvalidConfig(f"subvectors must be positive, got {self.subvectors}")

        max_centroids = 1 << _CODE_BITS[self.tier]
        if not 2 <= self.centroids <= max_centroids:
            raise InvalidConfig(
                f"{self.tier.value} supports 2..{max_centroids} centroids, got {self.centroids}"
            )
        if not 0 <= self.codebook_seed < 2 ** 32:
            raise InvalidConfig(f"codebook_seed must fit in 32 bits, got {self.codebook_seed}")

    @property
    def code_bits(self) -> int:
        return _CODE_BITS.get(self.tier, 0)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def full(cls) -> "CompressionLevel":
        return cls(Tier.FULL)

    @classmethod
    def half(cls) -> "CompressionLevel":
        return cls(Tier.HALF)

    @classmethod
    def pq8(
        cls, subvectors: int = 8, centroids: int = 256, codebook_seed: int = 0
    ) -> "CompressionLevel":
        return cls(Tier.PQ8, subvectors, centroids, codebook_seed)

    @classmethod
    def pq4(
        cls, subvectors: int = 8, centroids: int = 16, codebook_seed: int = 0
    ) -> "CompressionLevel":
        return cls(Tier.PQ4, subvectors, centroids, codebook_seed)

    @classmethod
    def binary(cls) -> "CompressionLevel":
        return cls(Tier.BINARY)

    @classmethod
    def for_tier(cls, tier: Tier, config: CodecConfig) -> "CompressionLevel":
        if tier is Tier.PQ8:
            return cls.pq8(config.pq_subvectors, config.pq8_centroids, config.codebook_seed)
        if tier is Tier.PQ4:
            return cls.pq4(config.pq_subvectors, config.pq4_centroids, config.codebook_seed)
        return cls(tier)
