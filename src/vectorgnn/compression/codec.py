from __future__ import annotations

from typing import Callable, Dict, Iterable, Tuple
import logging

import numpy as np

from vectorgnn.compression.codebook import nearest_codes, shared_codebook
from vectorgnn.compression.tensor import CompressedTensor, ScaleMetadata
from vectorgnn.compression.tiers import CompressionLevel, Tier
from vectorgnn.errors import InvalidConfig, InvalidDimension, InvalidValue
from vectorgnn.utils.helpers import EMBEDDING_DTYPE, ensure_finite

Encoder = Callable[[np.ndarray, CompressionLevel], Tuple[bytes, ScaleMetadata]]
Decoder = Callable[[CompressedTensor], np.ndarray]


class QuantizationCodec:
    """
    Deterministic encode/decode between float32 embeddings and the five
    storage tiers.

    Holds no per-call state; one instance can serve any number of
    threads.
    """

    def encode(self, vector: Iterable[float], level: CompressionLevel) -> CompressedTensor:
        arr = self._validate(vector)

        if level.tier.is_product_quantized and arr.shape[0] % level.subvectors != 0:
            raise InvalidConfig(
                f"vector length {arr.shape[0]} is not divisible by "
                f"{level.subvectors} subvectors"
            )

        encoder, _ = _DISPATCH[level.tier]
        payload, metadata = encoder(arr, level)

        logging.getLogger("vectorgnn.codec").debug(
            "encoded dim=%s tier=%s payload=%s bytes",
            arr.shape[0],
            level.tier.value,
            len(payload),
        )
        return CompressedTensor(
            tier=level.tier,
            dim=int(arr.shape[0]),
            payload=payload,
            metadata=metadata,
        )

    def decode(self, tensor: CompressedTensor) -> np.ndarray:
        if tensor.dim <= 0:
            raise InvalidDimension("compressed tensor has no dimensions")

        expected = expected_payload_size(tensor)
        if len(tensor.payload) != expected:
            raise InvalidValue(
                f"{tensor.tier.value} payload for dim {tensor.dim} must be "
                f"{expected} bytes, got {len(tensor.payload)}"
            )

        _, decoder = _DISPATCH[tensor.tier]
        return decoder(tensor)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(vector: Iterable[float]) -> np.ndarray:
        arr = np.asarray(vector, dtype=np.float64)
        if arr.ndim != 1:
            raise InvalidDimension(f"vector must be one-dimensional, got shape {arr.shape}")
        if arr.shape[0] == 0:
            raise InvalidDimension("cannot compress an empty vector")

        ensure_finite(arr, name="vector")
        arr = arr.astype(EMBEDDING_DTYPE)
        # Values beyond float32 range overflow during the cast.
        ensure_finite(arr, name="vector")
        return arr


def expected_payload_size(tensor: CompressedTensor) -> int:
    dim = tensor.dim
    if tensor.tier is Tier.FULL:
        return dim * 4
    if tensor.tier is Tier.HALF:
        return dim * 2
    if tensor.tier is Tier.PQ8:
        return tensor.metadata.subvectors
    if tensor.tier is Tier.PQ4:
        return (tensor.metadata.subvectors + 1) // 2
    return (dim + 7) // 8


# ---------------------------------------------------------------------
# Full precision
# ---------------------------------------------------------------------


def _encode_full(arr: np.ndarray, level: CompressionLevel) -> Tuple[bytes, ScaleMetadata]:
    return arr.astype("<f4").tobytes(), ScaleMetadata()


def _decode_full(tensor: CompressedTensor) -> np.ndarray:
    return np.frombuffer(tensor.payload, dtype="<f4").astype(EMBEDDING_DTYPE)


# ---------------------------------------------------------------------
# Half precision
# ---------------------------------------------------------------------


def _encode_half(arr: np.ndarray, level: CompressionLevel) -> Tuple[bytes, ScaleMetadata]:
    # Scaling into [-1, 1] keeps large magnitudes clear of float16 overflow.
    scale = float(np.max(np.abs(arr)))
    if scale == 0.0:
        scale = 1.0
    scaled = (arr.astype(np.float64) / scale).astype("<f2")
    return scaled.tobytes(), ScaleMetadata(scale=scale)


def _decode_half(tensor: CompressedTensor) -> np.ndarray:
    scaled = np.frombuffer(tensor.payload, dtype="<f2").astype(np.float64)
    return (scaled * tensor.metadata.scale).astype(EMBEDDING_DTYPE)


# ---------------------------------------------------------------------
# Product quantization (PQ8 / PQ4)
# ---------------------------------------------------------------------


def _pq_codes(arr: np.ndarray, level: CompressionLevel) -> Tuple[np.ndarray, ScaleMetadata]:
    """
    Split the max-abs normalized vector into ``level.subvectors`` chunks
    and map each chunk to the index of its nearest shared code vector.
    """
    values = arr.astype(np.float64)
    scale = float(np.max(np.abs(values)))
    normalized = values / scale if scale > 0.0 else values

    chunks = normalized.reshape(level.subvectors, -1)
    table = shared_codebook(chunks.shape[1], level.centroids, level.codebook_seed)
    codes = nearest_codes(chunks, table).astype(np.uint8)

    metadata = ScaleMetadata(
        scale=scale,
        subvectors=level.subvectors,
        centroids=level.centroids,
        codebook_seed=level.codebook_seed,
    )
    return codes, metadata


def _pq_reconstruct(codes: np.ndarray, tensor: CompressedTensor) -> np.ndarray:
    table = tensor.codebook()
    if codes.size and int(codes.max()) >= table.shape[0]:
        raise InvalidValue(
            f"{tensor.tier.value} code exceeds codebook size {table.shape[0]}"
        )
    restored = table[codes.astype(np.intp)].reshape(-1) * tensor.metadata.scale
    return restored.astype(EMBEDDING_DTYPE)


def _encode_pq8(arr: np.ndarray, level: CompressionLevel) -> Tuple[bytes, ScaleMetadata]:
    codes, metadata = _pq_codes(arr, level)
    return codes.tobytes(), metadata


def _decode_pq8(tensor: CompressedTensor) -> np.ndarray:
    codes = np.frombuffer(tensor.payload, dtype=np.uint8)
    return _pq_reconstruct(codes, tensor)


def _encode_pq4(arr: np.ndarray, level: CompressionLevel) -> Tuple[bytes, ScaleMetadata]:
    codes, metadata = _pq_codes(arr, level)
    if codes.shape[0] % 2:
        codes = np.append(codes, np.uint8(0))
    packed = (codes[0::2] << 4) | codes[1::2]
    return packed.astype(np.uint8).tobytes(), metadata


def _decode_pq4(tensor: CompressedTensor) -> np.ndarray:
    packed = np.frombuffer(tensor.payload, dtype=np.uint8)
    codes = np.empty(packed.shape[0] * 2, dtype=np.uint8)
    codes[0::2] = packed >> 4
    codes[1::2] = packed & 0x0F
    return _pq_reconstruct(codes[: tensor.metadata.subvectors], tensor)


# ---------------------------------------------------------------------
# Binary
# ---------------------------------------------------------------------


def _encode_binary(arr: np.ndarray, level: CompressionLevel) -> Tuple[bytes, ScaleMetadata]:
    # Mean magnitude is the L2-optimal scale for a fixed sign pattern.
    magnitude = float(np.mean(np.abs(arr.astype(np.float64))))
    bits = np.packbits(arr >= 0.0)
    return bits.tobytes(), ScaleMetadata(scale=magnitude)


def _decode_binary(tensor: CompressedTensor) -> np.ndarray:
    bits = np.unpackbits(np.frombuffer(tensor.payload, dtype=np.uint8), count=tensor.dim)
    magnitude = tensor.metadata.scale
    return np.where(bits.astype(bool), magnitude, -magnitude).astype(EMBEDDING_DTYPE)


_DISPATCH: Dict[Tier, Tuple[Encoder, Decoder]] = {
    Tier.FULL: (_encode_full, _decode_full),
    Tier.HALF: (_encode_half, _decode_half),
    Tier.PQ8: (_encode_pq8, _decode_pq8),
    Tier.PQ4: (_encode_pq4, _decode_pq4),
    Tier.BINARY: (_encode_binary, _decode_binary),
}
