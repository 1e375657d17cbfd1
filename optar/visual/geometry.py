"""Page geometry: layout parameters, channel capacity and pixel addressing.

A page is a rectangle of data pixels framed by a border, with a light
text strip below it. Inside the data rectangle sits a grid of
xcrosses x ycrosses alignment crosses, each 2*chalf pixels square,
spaced cpitch apart. Data pixels fill everything that is not a cross.

Data pixels are numbered row by row in repeating horizontal bands:

- a *narrow* band, 2*chalf rows tall, level with a row of crosses; only
  the gaps between crosses carry data
- a *wide* band, cpitch - 2*chalf rows tall, between two rows of crosses;
  every pixel of the full data width carries data

One narrow + wide pair is a repetition. The page holds ycrosses - 1
repetitions followed by one final narrow band.

Coordinates returned by LayoutConfig.seq2xy() are relative to the upper
left pixel of the first cross, i.e. the border is not included.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..errors import LayoutError

# ---------------------------------------------------------------------------
# FEC order
# ---------------------------------------------------------------------------

GOLAY = 1  # wire value selecting the Golay code
MIN_HAMMING_ORDER = 2
MAX_HAMMING_ORDER = 6  # 2**6 = 64-bit codeword


@dataclass(frozen=True)
class FecOrder:
    """Forward error correction selector.

    order == GOLAY selects the (24, 12) Golay code. Any other value selects
    the extended Hamming code with 2**order encoded bits, of which
    2**order - 1 - order carry payload.
    """
    order: int = GOLAY

    def __post_init__(self) -> None:
        if self.order == GOLAY:
            return
        if not MIN_HAMMING_ORDER <= self.order <= MAX_HAMMING_ORDER:
            raise LayoutError(
                f"Hamming order must be in {MIN_HAMMING_ORDER}.."
                f"{MAX_HAMMING_ORDER}, got {self.order}")

    @classmethod
    def golay(cls) -> "FecOrder":
        return cls(GOLAY)

    @classmethod
    def hamming(cls, order: int) -> "FecOrder":
        if order == GOLAY:
            raise LayoutError("Hamming order 1 is reserved for Golay")
        return cls(order)

    @classmethod
    def from_int(cls, value: int) -> "FecOrder":
        """Decode the integer used in configuration strings (1 = Golay)."""
        return cls(value)

    @property
    def is_golay(self) -> bool:
        return self.order == GOLAY

    @property
    def large_bits(self) -> int:
        """Encoded bits per symbol."""
        if self.is_golay:
            return 24
        return 1 << self.order

    @property
    def small_bits(self) -> int:
        """Payload bits per symbol."""
        if self.is_golay:
            return 12
        return self.large_bits - 1 - self.order

    def __int__(self) -> int:
        return self.order

    def __str__(self) -> str:
        if self.is_golay:
            return "Golay"
        return f"Hamming({self.order})"


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

# Order of fields in a configuration string, after the ignored first token
_STRING_FIELDS = ("xcrosses", "ycrosses", "cpitch", "chalf", "fec_order",
                  "border", "text_height")


@dataclass(frozen=True)
class LayoutConfig:
    """Immutable page layout. All sizes are in pixels."""
    border: int = 2         # thickness of the dark frame
    chalf: int = 3          # half the cross size; a cross is 2*chalf square
    cpitch: int = 24        # distance between cross origins
    text_width: int = 13    # glyph width in the label strip
    text_height: int = 24   # height of the label strip below the frame
    xcrosses: int = 67      # crosses per row
    ycrosses: int = 87      # crosses per column
    fec_order: FecOrder = field(default_factory=FecOrder.golay)

    def __post_init__(self) -> None:
        for name in ("border", "chalf", "cpitch", "text_width",
                     "text_height", "xcrosses", "ycrosses"):
            if getattr(self, name) < 0:
                raise LayoutError(f"{name} must not be negative")
        if self.chalf == 0:
            raise LayoutError("chalf must be positive")
        if self.xcrosses < 2 or self.ycrosses < 2:
            raise LayoutError("need at least 2x2 crosses")
        if self.cpitch <= 2 * self.chalf:
            raise LayoutError(
                f"cpitch ({self.cpitch}) must exceed the cross size "
                f"2*chalf ({2 * self.chalf})")
        if self.fec_syms == 0:
            raise LayoutError(
                f"page of {self.total_bits} bits cannot hold a single "
                f"{self.fec_order} symbol of {self.fec_order.large_bits} bits")

    # -- configuration string ----------------------------------------------

    @classmethod
    def from_string(cls, text: str) -> "LayoutConfig":
        """Parse ``_-XCROSSES-YCROSSES-CPITCH-CHALF-FECORDER-BORDER-TEXTHEIGHT``.

        The first token is ignored. Missing trailing fields keep their
        defaults; a non-integer token raises ValueError.
        """
        tokens = text.split("-")[1:]
        if len(tokens) > len(_STRING_FIELDS):
            raise LayoutError(
                f"too many fields in layout string {text!r}")
        values: dict = {}
        for name, token in zip(_STRING_FIELDS, tokens):
            values[name] = int(token)
        if "fec_order" in values:
            values["fec_order"] = FecOrder.from_int(values["fec_order"])
        return cls(**values)

    def to_string(self, prefix: str = "optar") -> str:
        values = [str(int(getattr(self, name))) for name in _STRING_FIELDS]
        return "-".join([prefix] + values)

    # -- canvas ------------------------------------------------------------

    @property
    def data_width(self) -> int:
        """Width of the rectangle occupied by data and crosses."""
        return self.cpitch * (self.xcrosses - 1) + 2 * self.chalf

    @property
    def data_height(self) -> int:
        return self.cpitch * (self.ycrosses - 1) + 2 * self.chalf

    @property
    def width(self) -> int:
        return 2 * self.border + self.data_width

    @property
    def height(self) -> int:
        return 2 * self.border + self.data_height + self.text_height

    # -- bands ---------------------------------------------------------------

    @property
    def narrow_height(self) -> int:
        return 2 * self.chalf

    @property
    def gap_width(self) -> int:
        """Horizontal gap between two neighbouring crosses."""
        return self.cpitch - 2 * self.chalf

    @property
    def narrow_width(self) -> int:
        return self.gap_width * (self.xcrosses - 1)

    @property
    def narrow_pixels(self) -> int:
        return self.narrow_height * self.narrow_width

    @property
    def wide_height(self) -> int:
        return self.gap_width

    @property
    def wide_width(self) -> int:
        return self.data_width

    @property
    def wide_pixels(self) -> int:
        return self.wide_height * self.wide_width

    @property
    def rep_height(self) -> int:
        return self.narrow_height + self.wide_height

    @property
    def rep_pixels(self) -> int:
        return self.narrow_pixels + self.wide_pixels

    # -- capacity ------------------------------------------------------------

    @property
    def total_bits(self) -> int:
        """Data pixels on one page, including those no symbol fills."""
        return self.rep_pixels * (self.ycrosses - 1) + self.narrow_pixels

    @property
    def fec_syms(self) -> int:
        """Whole FEC symbols per page."""
        return self.total_bits // self.fec_order.large_bits

    @property
    def net_bits(self) -> int:
        """Payload bits per page."""
        return self.fec_syms * self.fec_order.small_bits

    @property
    def used_bits(self) -> int:
        """Channel bits per page actually written."""
        return self.fec_syms * self.fec_order.large_bits

    # -- addressing ----------------------------------------------------------

    def is_cross(self, x: int, y: int) -> bool:
        size = 2 * self.chalf
        return x % self.cpitch < size and y % self.cpitch < size

    def seq2xy(self, seq: int) -> Optional[Tuple[int, int]]:
        """Map a sequence index to (x, y) inside the data rectangle.

        Returns None when *seq* is outside [0, total_bits).
        """
        if seq < 0 or seq >= self.total_bits:
            return None
        rep, seq = divmod(seq, self.rep_pixels)
        y = rep * self.rep_height

        if seq >= self.narrow_pixels:
            # Wide band: the full row width carries data
            seq -= self.narrow_pixels
            row, x = divmod(seq, self.wide_width)
            return x, y + self.narrow_height + row

        # Narrow band: only the gaps between crosses
        row, seq = divmod(seq, self.narrow_width)
        gap, offset = divmod(seq, self.gap_width)
        x = 2 * self.chalf + gap * self.cpitch + offset
        return x, y + row
