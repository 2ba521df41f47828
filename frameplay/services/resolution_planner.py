"""Aspect-preserving character grid planning.

Policy: compute the display aspect from width, height and sample aspect ratio,
divide it by the character cell aspect, then derive the row count from a fixed
column count. Width is the configured maximum, less one when that is odd.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from fractions import Fraction

from frameplay.core.settings import DEFAULT_CELL_ASPECT, DEFAULT_MAX_COLUMNS

LOG = logging.getLogger(__name__)

# Lower bound for the cell-adjusted aspect; a zero-width source reaches it.
MIN_ADJUSTED_ASPECT = 1e-3


@dataclass(frozen=True)
class ResolutionPlan:
    target_width: int
    target_height: int

    @property
    def size(self) -> tuple[int, int]:
        return self.target_width, self.target_height


def _round_half_up(value: float) -> int:
    # C round(): halves go away from zero. Inputs here are never negative.
    return int(math.floor(value + 0.5))


def _round_even(value: float) -> int:
    return _round_half_up(value / 2.0) * 2


def ratio_terms(ratio) -> tuple[int, int]:
    """Normalize a ratio given as ``Fraction``, ``(num, den)`` or ``None``."""
    if ratio is None:
        return 0, 1
    if isinstance(ratio, Fraction):
        return ratio.numerator, ratio.denominator
    num, den = ratio
    return int(num), int(den)


def display_aspect_ratio(width: int, height: int, sample_aspect_ratio) -> float:
    """Return the displayed width/height ratio, ``inf`` for a non-positive height."""
    num, den = ratio_terms(sample_aspect_ratio)
    display_width = float(width)
    if num > 0 and den > 0:
        display_width = display_width * num / den
    if height <= 0:
        return math.inf
    return display_width / height


def plan_resolution(
    width: int,
    height: int,
    sample_aspect_ratio=None,
    *,
    max_columns: int = DEFAULT_MAX_COLUMNS,
    cell_aspect: float = DEFAULT_CELL_ASPECT,
) -> ResolutionPlan:
    display_aspect = display_aspect_ratio(width, height, sample_aspect_ratio)
    adjusted_aspect = max(display_aspect / cell_aspect, MIN_ADJUSTED_ASPECT)

    even_width = _round_even(max_columns)
    if even_width > max_columns:
        # An odd cap rounds up; stay within it.
        even_width -= 2
    even_width = even_width or 2

    # Rows follow the width actually drawn.
    target_height = float(_round_half_up(even_width / adjusted_aspect))
    if target_height < 1:
        target_height = 1
    even_height = _round_even(target_height) or 2

    num, den = ratio_terms(sample_aspect_ratio)
    LOG.info(
        "[PLAN] input %dx%d (pixel aspect %d:%d, display aspect %f), cell aspect compensation %f",
        width,
        height,
        num,
        den,
        display_aspect,
        cell_aspect,
    )
    LOG.info("[PLAN] output grid (characters): %dx%d", even_width, even_height)
    return ResolutionPlan(target_width=even_width, target_height=even_height)
