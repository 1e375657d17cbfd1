"""Bit packing: turn a byte stream into FEC symbols placed on pages.

Bytes are fed MSB first into an accumulator. Each time a symbol's worth
of payload bits has arrived it is encoded, and the codeword bits are
spread over the page in bit-plane order: bit p of symbol s goes to
sequence index ``s + p * fec_syms``. All symbols' first bits come first,
then all second bits, and so on, so damage to one area of the paper hits
many symbols lightly instead of one symbol heavily.
"""

from __future__ import annotations

import io
import logging
from typing import BinaryIO

from .ecc import FecCodec, codec_for
from .geometry import LayoutConfig
from .renderer import (
    DEFAULT_BASE_NAME,
    EncoderState,
    PageRenderer,
    PageSink,
)

log = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class BitStreamPacker:
    """Feeds payload bits through the FEC codec onto rendered pages."""

    def __init__(self, state: EncoderState, renderer: PageRenderer,
                 codec: FecCodec | None = None):
        self.state = state
        self.renderer = renderer
        self.codec = codec or codec_for(state.layout.fec_order)
        self.bytes_in = 0
        self.symbols_out = 0

    @property
    def layout(self) -> LayoutConfig:
        return self.state.layout

    def write_payloadbit(self, bit: int) -> None:
        """Append one payload bit. Only the LSB of *bit* counts."""
        state = self.state
        state.accu = (state.accu << 1) | (bit & 1)
        if state.accu & (1 << self.layout.fec_order.small_bits):
            self._write_symbol()

    def _write_symbol(self) -> None:
        state = self.state
        cfg = self.layout
        if state.hamming_symbol >= cfg.fec_syms:
            self.renderer.new_file()
            state.hamming_symbol = 0

        codeword = self.codec.encode(state.accu)
        large = cfg.fec_order.large_bits
        for p in range(large):
            bit = (codeword >> (large - 1 - p)) & 1
            self.renderer.write_channelbit(
                bit, state.hamming_symbol + p * cfg.fec_syms)

        state.accu = 1
        state.hamming_symbol += 1
        self.symbols_out += 1

    def write_byte(self, byte: int) -> None:
        for shift in range(7, -1, -1):
            self.write_payloadbit(byte >> shift)
        self.bytes_in += 1

    def feed_data(self, stream: BinaryIO) -> list[str]:
        """Encode *stream* to exhaustion and persist every page.

        Returns whatever the sink returned for each page, in order.
        """
        cfg = self.layout
        log.debug("Layout %s: %dx%d px, %d symbols/page, %d net bits/page",
                  cfg.fec_order, cfg.width, cfg.height, cfg.fec_syms,
                  cfg.net_bits)
        if self.state.file_number == 0:
            self.renderer.new_file()

        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            for byte in chunk:
                self.write_byte(byte)

        # Zero fill completes a partial symbol; an unstarted one is dropped
        for _ in range(cfg.fec_order.small_bits - 1):
            self.write_payloadbit(0)
        self.renderer.finish()

        log.info("Encoded %d bytes into %d symbols on %d page(s)",
                 self.bytes_in, self.symbols_out, self.state.file_number)
        return list(self.renderer.saved)


def encode_stream(stream: BinaryIO, layout: LayoutConfig, sink: PageSink,
                  base_name: str = DEFAULT_BASE_NAME) -> list[str]:
    """Encode *stream* onto pages described by *layout*, saving to *sink*."""
    state = EncoderState(layout=layout, base_name=base_name)
    renderer = PageRenderer(state, sink)
    packer = BitStreamPacker(state, renderer)
    return packer.feed_data(stream)


def encode_bytes(data: bytes, layout: LayoutConfig, sink: PageSink,
                 base_name: str = DEFAULT_BASE_NAME) -> list[str]:
    return encode_stream(io.BytesIO(data), layout, sink, base_name)
