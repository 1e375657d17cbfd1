"""Exception hierarchy.

All exceptions inherit from OptarError for unified handling.
"""


class OptarError(Exception):
    """Base exception for all optar errors."""


class LayoutError(OptarError, ValueError):
    """Raised when a page layout configuration is invalid."""


class ChannelIndexError(OptarError, IndexError):
    """Raised when a sequence index falls outside the page's data area."""

    def __init__(self, seq: int, total_bits: int):
        super().__init__(f"sequence index {seq} outside [0, {total_bits})")
        self.seq = seq
        self.total_bits = total_bits


class PageLimitError(OptarError, RuntimeError):
    """Raised when the output would need more pages than can be numbered."""
