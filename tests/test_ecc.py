"""Tests for the extended Hamming encoder."""

import numpy as np
import pytest

from optar.visual.ecc import (
    GolayCodec,
    HammingCodec,
    codec_for,
    hamming,
    parity,
    split,
)
from optar.visual.geometry import FecOrder


def _syndrome(word: int, width: int) -> tuple[int, int]:
    """(XOR of the indices of all set bits, overall parity)."""
    s = 0
    for i in range(width):
        if (word >> i) & 1:
            s ^= i
    return s, parity(word)


def _data_bits(word: int, width: int) -> int:
    """Collect the payload positions (not 0, not powers of two) LSB first."""
    out = 0
    n = 0
    for i in range(3, width):
        if i & (i - 1) == 0:
            continue
        out |= ((word >> i) & 1) << n
        n += 1
    return out


def _sample_payloads(order: int, count: int = 200, seed: int = 7) -> list[int]:
    small = FecOrder.hamming(order).small_bits
    if small <= 12:
        return list(range(1 << small))
    rng = np.random.RandomState(seed)
    payloads = [0, (1 << small) - 1]
    for _ in range(count):
        value = 0
        for _ in range(small):
            value = (value << 1) | int(rng.randint(0, 2))
        payloads.append(value)
    return payloads


class TestParity:
    @pytest.mark.parametrize("value", [
        0, 1, 2, 3, 0b1011, 0xFF, 0xA596, 0xDEADBEEF,
        (1 << 63) | 1, (1 << 64) - 1, (1 << 100) | (1 << 70) | 5,
    ])
    def test_matches_popcount(self, value):
        assert parity(value) == bin(value).count("1") % 2

    def test_exhaustive_byte(self):
        for value in range(256):
            assert parity(value) == bin(value).count("1") % 2

    def test_negative(self):
        with pytest.raises(ValueError):
            parity(-1)


class TestSplit:
    def test_opens_zero_slot(self):
        assert split(0b1111, 2) == 0b11011
        assert split(0b1, 0) == 0b10
        assert split(0b101, 4) == 0b101

    def test_low_bits_untouched(self):
        assert split(0b110110, 3) == 0b1100110


class TestHamming:
    def test_known_codeword(self):
        # 0xA5 followed by three zero bits of padding
        assert hamming(0xA5 << 3, 4) == 0xA596

    def test_zero(self):
        for order in range(2, 7):
            assert hamming(0, order) == 0

    @pytest.mark.parametrize("order", [2, 3, 4, 5, 6])
    def test_width(self, order):
        fec = FecOrder.hamming(order)
        for payload in _sample_payloads(order):
            assert hamming(payload, order) < 1 << fec.large_bits

    @pytest.mark.parametrize("order", [2, 3, 4, 5, 6])
    def test_payload_in_data_positions(self, order):
        width = FecOrder.hamming(order).large_bits
        for payload in _sample_payloads(order):
            assert _data_bits(hamming(payload, order), width) == payload

    @pytest.mark.parametrize("order", [2, 3, 4, 5, 6])
    def test_valid_codeword_has_zero_syndrome(self, order):
        width = FecOrder.hamming(order).large_bits
        for payload in _sample_payloads(order):
            assert _syndrome(hamming(payload, order), width) == (0, 0)

    @pytest.mark.parametrize("order", [2, 3, 4, 5])
    def test_single_error_located(self, order):
        width = FecOrder.hamming(order).large_bits
        for payload in _sample_payloads(order, count=20):
            word = hamming(payload, order)
            for pos in range(width):
                assert _syndrome(word ^ (1 << pos), width) == (pos, 1)

    @pytest.mark.parametrize("order", [2, 3, 4])
    def test_double_error_detected(self, order):
        width = FecOrder.hamming(order).large_bits
        word = hamming((1 << FecOrder.hamming(order).small_bits) - 1, order)
        for a in range(width):
            for b in range(a + 1, width):
                syndrome, overall = _syndrome(word ^ (1 << a) ^ (1 << b), width)
                assert overall == 0
                assert syndrome != 0

    def test_marker_bit_ignored(self):
        small = FecOrder.hamming(4).small_bits
        assert hamming((1 << small) | 0x123, 4) == hamming(0x123, 4)

    def test_golay_order_rejected(self):
        with pytest.raises(ValueError):
            hamming(5, 1)


class TestCodecs:
    def test_codec_for_hamming(self):
        codec = codec_for(FecOrder.hamming(4))
        assert isinstance(codec, HammingCodec)
        assert codec.large_bits == 16
        assert codec.small_bits == 11
        assert codec.encode(0xA5 << 3) == 0xA596

    def test_codec_for_golay(self):
        codec = codec_for(FecOrder.golay())
        assert isinstance(codec, GolayCodec)
        assert codec.large_bits == 24
        assert codec.small_bits == 12

    def test_golay_not_implemented(self):
        with pytest.raises(NotImplementedError):
            GolayCodec().encode(0x123)

    def test_hamming_codec_rejects_golay(self):
        with pytest.raises(ValueError):
            HammingCodec(FecOrder.golay())
