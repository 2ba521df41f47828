"""Frame value types passed between the pipeline stages."""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class ConvertedFrame:
    """Single-plane grayscale image at the planned character resolution.

    ``pixels`` is a ``height x width`` uint8 view; ``stride`` is the row pitch of
    the plane it was read from.
    """

    width: int
    height: int
    stride: int
    pixels: np.ndarray
    pts: int | None = None

    @classmethod
    def from_plane(cls, data, width: int, height: int, stride: int, pts: int | None = None) -> "ConvertedFrame":
        """Build from a strided plane buffer (``stride >= width`` bytes per row)."""
        flat = np.frombuffer(data, dtype=np.uint8)
        rows = flat[: stride * height].reshape(height, stride)
        return cls(width=width, height=height, stride=stride, pixels=rows[:, :width].copy(), pts=pts)

    @classmethod
    def from_av_frame(cls, frame) -> "ConvertedFrame":
        plane = frame.planes[0]
        return cls.from_plane(plane, frame.width, frame.height, plane.line_size, pts=frame.pts)


@dataclass
class FrameSlots:
    """Single owner of the in-flight decoded and converted frames."""

    raw: object | None = None
    converted: ConvertedFrame | None = None
    released: bool = False

    def hold_raw(self, frame) -> None:
        self.raw = frame

    def release_raw(self) -> None:
        self.raw = None

    def hold_converted(self, frame: ConvertedFrame) -> None:
        self.converted = frame

    def release_converted(self) -> None:
        self.converted = None

    def release(self) -> None:
        self.raw = None
        self.converted = None
        self.released = True
