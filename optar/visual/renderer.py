"""Page renderer: draw the frame, the crosses and channel bits onto pages.

Pages are single-channel uint8 numpy arrays of shape (height, width),
0 for dark and 255 for light. Finished pages are handed to a PageSink,
which decides where they are stored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

import cv2
import numpy as np

from ..errors import ChannelIndexError, PageLimitError
from .geometry import LayoutConfig

log = logging.getLogger(__name__)

DARK = 0
LIGHT = 255
MAX_PAGES = 9999
DEFAULT_BASE_NAME = "optar_out"


def page_name(base_name: str, page_number: int) -> str:
    """Name of a page without extension: ``<base>_<NNNN>``."""
    return f"{base_name}_{page_number:04d}"


# ---------------------------------------------------------------------------
# Page sinks
# ---------------------------------------------------------------------------

class PageSink(Protocol):
    """Destination for finished pages."""
    def save(self, page: np.ndarray, name: str) -> str: ...


class FileSink:
    """Writes each page as an image file with OpenCV."""

    def __init__(self, ext: str = "png", directory: Path | str | None = None):
        self.ext = ext.lstrip(".")
        self.directory = Path(directory) if directory is not None else None

    def path_for(self, name: str) -> Path:
        filename = f"{name}.{self.ext}"
        if self.directory is None:
            return Path(filename)
        return self.directory / filename

    def save(self, page: np.ndarray, name: str) -> str:
        path = self.path_for(name)
        try:
            ok = cv2.imwrite(str(path), page)
        except cv2.error as exc:
            raise OSError(f"Failed to write {path}: {exc}") from exc
        if not ok:
            raise OSError(f"Failed to write {path}")
        return str(path)


class MemorySink:
    """Keeps copies of finished pages in memory."""

    def __init__(self):
        self.pages: list[tuple[str, np.ndarray]] = []

    def save(self, page: np.ndarray, name: str) -> str:
        self.pages.append((name, page.copy()))
        return name


# ---------------------------------------------------------------------------
# Encoder state
# ---------------------------------------------------------------------------

@dataclass
class EncoderState:
    """Mutable state of one encoding run.

    accu collects payload bits behind a leading marker bit; the marker's
    position is the number of bits collected for the current symbol.
    hamming_symbol counts symbols written to the current page and
    file_number counts pages, starting at 1 once the first page exists.
    """
    layout: LayoutConfig
    base_name: str = DEFAULT_BASE_NAME
    buffer: Optional[np.ndarray] = field(default=None, repr=False)
    accu: int = 1
    hamming_symbol: int = 0
    file_number: int = 0


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------

class PageRenderer:
    """Owns the page being drawn and hands finished pages to a sink."""

    def __init__(self, state: EncoderState, sink: PageSink):
        self.state = state
        self.sink = sink
        self.saved: list[str] = []

    @property
    def layout(self) -> LayoutConfig:
        return self.state.layout

    @property
    def buffer(self) -> np.ndarray:
        if self.state.buffer is None:
            raise RuntimeError("no page in progress; call new_file() first")
        return self.state.buffer

    def reformat_buffer(self) -> None:
        """Start a blank page with the frame and crosses drawn."""
        cfg = self.layout
        self.state.buffer = np.full((cfg.height, cfg.width), LIGHT,
                                    dtype=np.uint8)
        self.border()
        self.crosses()
        log.debug("Formatted page %d (%dx%d)", self.state.file_number,
                  cfg.width, cfg.height)

    def border(self) -> None:
        """Draw the dark frame around the data area, above the text strip."""
        cfg = self.layout
        img = self.buffer
        b = cfg.border
        bottom = cfg.height - cfg.text_height
        img[:b, :] = DARK                       # top
        img[bottom - b:bottom, :] = DARK        # bottom
        img[:bottom, :b] = DARK                 # left
        img[:bottom, cfg.width - b:] = DARK     # right

    def cross(self, x: int, y: int) -> None:
        """Draw one cross with its upper left corner at pixel (x, y).

        Four chalf-sized squares: upper left and lower right dark, the
        other two light.
        """
        c = self.layout.chalf
        img = self.buffer
        img[y:y + c, x:x + c] = DARK
        img[y:y + c, x + c:x + 2 * c] = LIGHT
        img[y + c:y + 2 * c, x:x + c] = LIGHT
        img[y + c:y + 2 * c, x + c:x + 2 * c] = DARK

    def crosses(self) -> None:
        cfg = self.layout
        for j in range(cfg.ycrosses):
            for i in range(cfg.xcrosses):
                self.cross(cfg.border + i * cfg.cpitch,
                           cfg.border + j * cfg.cpitch)

    def write_channelbit(self, bit: int, seq: int) -> None:
        """Paint channel bit *seq*: 1 dark, 0 light. Only the LSB counts."""
        cfg = self.layout
        xy = cfg.seq2xy(seq)
        if xy is None:
            raise ChannelIndexError(seq, cfg.total_bits)
        x, y = xy
        self.buffer[y + cfg.border, x + cfg.border] = DARK if bit & 1 else LIGHT

    def commit(self) -> str:
        """Hand the current page to the sink."""
        name = page_name(self.state.base_name, self.state.file_number)
        path = self.sink.save(self.buffer, name)
        self.saved.append(path)
        log.info("Wrote page %d to %s", self.state.file_number, path)
        return path

    def new_file(self) -> None:
        """Persist the current page, if any, and start the next one."""
        state = self.state
        if state.file_number > 0:
            self.commit()
        if state.file_number >= MAX_PAGES:
            raise PageLimitError(
                f"output needs more than {MAX_PAGES} pages")
        state.file_number += 1
        self.reformat_buffer()

    def finish(self) -> str:
        """Persist the last page."""
        return self.commit()
