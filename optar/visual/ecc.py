"""Forward error correction for channel symbols.

Payload bits are grouped into symbols and each symbol is expanded into an
extended Hamming codeword (SECDED: corrects one flipped bit, detects two).
Bits live on the LSB side of a plain int register. In a codeword of
2**order bits, position 0 holds the overall parity, each power-of-two
position 2**k holds the parity of all positions whose index has bit k set,
and the remaining positions hold payload bits in ascending order.

The Golay code is selectable in the layout but has no encoder yet.
"""

from __future__ import annotations

from typing import Protocol

from .geometry import FecOrder


def parity(value: int) -> int:
    """Return the XOR of all bits of *value* (popcount mod 2)."""
    if value < 0:
        raise ValueError("parity is only defined for non-negative values")
    shift = 32
    while value >> (2 * shift):
        shift <<= 1
    # Fold the upper half onto the lower half until one bit remains
    while shift:
        value ^= value >> shift
        shift >>= 1
    return value & 1


def split(value: int, bit: int) -> int:
    """Insert a zero at position *bit*, moving bits at and above it up by one."""
    low = value & ((1 << bit) - 1)
    high = value ^ low
    return (high << 1) | low


def _block_mask(x: int, width: int) -> int:
    """Mask of positions below *width* whose index has the *x* bit set.

    Built by tiling a block of x zeros topped by x ones across the register.
    """
    unit = ((1 << x) - 1) << x
    mask = 0
    for shift in range(0, width, 2 * x):
        mask |= unit << shift
    return mask & ((1 << width) - 1)


def hamming(value: int, order: int) -> int:
    """Encode the low payload bits of *value* as an extended Hamming codeword.

    Only the lowest ``small_bits`` of *value* are used; anything above
    (such as an accumulator marker bit) is discarded.
    """
    fec = FecOrder.hamming(order)
    width = fec.large_bits
    value &= (1 << fec.small_bits) - 1
    value <<= 3  # positions 0, 1 and 2 are parity
    for bit in range(3, order + 1):
        value = split(value, 1 << (bit - 1))
    for bit in range(order, 0, -1):
        x = 1 << (bit - 1)
        value |= parity(value & _block_mask(x, width)) << x
    value |= parity(value)
    return value


# ---------------------------------------------------------------------------
# Codecs
# ---------------------------------------------------------------------------

class FecCodec(Protocol):
    """Symbol encoder selected by a FecOrder."""
    order: FecOrder

    def encode(self, payload: int) -> int: ...


class HammingCodec:
    """Extended Hamming encoder for a fixed order."""

    def __init__(self, order: FecOrder):
        if order.is_golay:
            raise ValueError("HammingCodec needs a Hamming order")
        self.order = order

    @property
    def large_bits(self) -> int:
        return self.order.large_bits

    @property
    def small_bits(self) -> int:
        return self.order.small_bits

    def encode(self, payload: int) -> int:
        return hamming(payload, self.order.order)


class GolayCodec:
    """(24, 12) Golay encoder. Not implemented."""

    def __init__(self, order: FecOrder | None = None):
        self.order = order or FecOrder.golay()

    @property
    def large_bits(self) -> int:
        return self.order.large_bits

    @property
    def small_bits(self) -> int:
        return self.order.small_bits

    def encode(self, payload: int) -> int:
        raise NotImplementedError("Golay encoding is not implemented")


def codec_for(order: FecOrder) -> FecCodec:
    """Return the codec implementing *order*."""
    if order.is_golay:
        return GolayCodec(order)
    return HammingCodec(order)
