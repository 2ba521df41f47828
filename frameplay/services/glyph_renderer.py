"""Grayscale-to-glyph terminal renderer."""
from __future__ import annotations

import sys

import numpy as np

from frameplay.services.frames import ConvertedFrame

# Ordered light to dark.
GLYPH_RAMP = " .-+#"
GLYPH_BUCKET = 52
CURSOR_HOME = "\033[H"

# 255 // 52 == 4, so the last bucket absorbs 208..255.
_GLYPH_LUT = np.array(list(GLYPH_RAMP))[np.arange(256) // GLYPH_BUCKET]


def glyph_index(value: int) -> int:
    return int(value) // GLYPH_BUCKET


def glyph_for(value: int) -> str:
    return GLYPH_RAMP[glyph_index(value)]


def frame_to_text(frame: ConvertedFrame) -> str:
    """Return the frame as newline-terminated glyph rows."""
    glyphs = _GLYPH_LUT[frame.pixels]
    return "".join("".join(row) + "\n" for row in glyphs)


class GlyphRenderer:
    """Write frames to a text stream, repainting from the top-left corner."""

    def __init__(self, stream=None):
        self._stream = stream

    @property
    def stream(self):
        return self._stream if self._stream is not None else sys.stdout

    def render(self, frame: ConvertedFrame) -> None:
        out = self.stream
        out.write(CURSOR_HOME)
        out.write(frame_to_text(frame))
        out.flush()
