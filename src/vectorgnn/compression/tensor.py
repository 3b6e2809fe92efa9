from __future__ import annotations

from dataclasses import dataclass, field
import struct

import numpy as np

from vectorgnn.compression.codebook import shared_codebook
from vectorgnn.compression.tiers import Tier
from vectorgnn.errors import InvalidConfig, InvalidValue

MAGIC = b"VGCT"
FORMAT_VERSION = 2

# magic, version, tier code, dimension
_HEADER = struct.Struct("<4sBBI")
# scale, subvectors, centroids, codebook seed, payload length
_META = struct.Struct("<dIIII")

FLOAT32_BYTES = 4


@dataclass(frozen=True)
class ScaleMetadata:
    """
    Per-vector normalization needed to decode a tensor.

    - Half: ``scale`` is the max absolute value the payload was divided by
    - PQ8/PQ4: ``scale`` is the max absolute value; ``subvectors``,
      ``centroids`` and ``codebook_seed`` identify the shared codebook
    - Binary: ``scale`` is the shared magnitude
    """

    scale: float = 1.0
    subvectors: int = 0
    centroids: int = 0
    codebook_seed: int = 0


@dataclass(frozen=True)
class CompressedTensor:
    """
    Tier-tagged encoded embedding.

    Opaque to everything but the codec; the storage layer moves it
    around as the bytes returned by ``to_bytes``.
    """

    tier: Tier
    dim: int
    payload: bytes
    metadata: ScaleMetadata = field(default_factory=ScaleMetadata)

    def codebook(self) -> np.ndarray:
        """
        Shared code vectors of a product-quantized tensor, in normalized
        units (multiply by ``metadata.scale``).
        """
        meta = self.metadata
        if not self.tier.is_product_quantized:
            raise InvalidValue(f"{self.tier.value} tensors have no codebook")
        if meta.subvectors <= 0 or self.dim % meta.subvectors != 0:
            raise InvalidValue(
                f"{self.tier.value} tensor has invalid subvector count {meta.subvectors}"
            )
        try:
            return shared_codebook(self.dim // meta.subvectors, meta.centroids, meta.codebook_seed)
        except InvalidConfig as exc:
            raise InvalidValue(str(exc)) from exc

    # ------------------------------------------------------------------
    # Size accounting
    # ------------------------------------------------------------------

    @property
    def original_nbytes(self) -> int:
        return self.dim * FLOAT32_BYTES

    @property
    def nbytes(self) -> int:
        return _HEADER.size + _META.size + len(self.payload)

    @property
    def payload_ratio(self) -> float:
        """Float32 size divided by payload size, ignoring metadata."""
        return self.original_nbytes / max(len(self.payload), 1)

    @property
    def compression_ratio(self) -> float:
        """Float32 size divided by the full serialized size."""
        return self.original_nbytes / self.nbytes

    # ------------------------------------------------------------------
    # Byte format
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        meta = self.metadata
        return b"".join(
            [
                _HEADER.pack(MAGIC, FORMAT_VERSION, self.tier.code, self.dim),
                _META.pack(
                    meta.scale,
                    meta.subvectors,
                    meta.centroids,
                    meta.codebook_seed,
                    len(self.payload),
                ),
                self.payload,
            ]
        )

    @classmethod
    def from_bytes(cls, blob: bytes) -> "CompressedTensor":
        blob = bytes(blob)
        head = _HEADER.size + _META.size
        if len(blob) < head:
            raise InvalidValue(f"compressed tensor truncated: {len(blob)} bytes")

        magic, version, tier_code, dim = _HEADER.unpack_from(blob, 0)
        if magic != MAGIC:
            raise InvalidValue(f"not a compressed tensor (magic {magic!r})")
        if version != FORMAT_VERSION:
            raise InvalidValue(f"unsupported compressed tensor version {version}")
        try:
            tier = Tier.from_code(tier_code)
        except InvalidConfig as exc:
            raise InvalidValue(str(exc)) from exc

        scale, subvectors, centroids, seed, payload_len = _META.unpack_from(blob, _HEADER.size)

        payload = blob[head:]
        if len(payload) != payload_len:
            raise InvalidValue(
                f"compressed tensor payload is {len(payload)} bytes, header says {payload_len}"
            )

        return cls(
            tier=tier,
            dim=dim,
            payload=payload,
            metadata=ScaleMetadata(
                scale=scale,
                subvectors=subvectors,
                centroids=centroids,
                codebook_seed=seed,
            ),
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(tier={self.tier.value}, dim={self.dim}, "
            f"payload={len(self.payload)} bytes)"
        )
