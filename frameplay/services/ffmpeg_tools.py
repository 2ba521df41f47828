"""FFmpeg log wiring and filter-description helpers for the conversion graph."""
from __future__ import annotations

import logging

import av

from frameplay.services.errors import GraphParseError

LOG = logging.getLogger(__name__)

GRAYSCALE_FORMATS = ("gray",)


def configure_ffmpeg_logging(debug: bool = False) -> int:
    """Route libav* logging through PyAV at ERROR, or VERBOSE when debugging."""
    level = av.logging.VERBOSE if debug else av.logging.ERROR
    av.logging.set_level(level)
    return level


def format_rational(terms: tuple[int, int]) -> str:
    num, den = terms
    return f"{num}/{den}"


def build_buffer_args(descriptor) -> str:
    """Arguments for the ``buffer`` source; must match what the decoder emits."""
    return (
        f"video_size={descriptor.width}x{descriptor.height}:"
        f"pix_fmt={descriptor.pixel_format}:"
        f"time_base={format_rational(descriptor.time_base)}:"
        f"pixel_aspect={format_rational(descriptor.sample_aspect_ratio)}"
    )


def build_filter_description(plan, pixel_format: str = GRAYSCALE_FORMATS[0]) -> str:
    return f"scale={plan.target_width}:{plan.target_height},format={pixel_format}"


def parse_filter_description(description: str) -> list[tuple[str, str | None]]:
    """Split ``name=args,name=args`` into ordered ``(name, args)`` stages."""
    if not description or not description.strip():
        raise GraphParseError("empty filter description")

    stages: list[tuple[str, str | None]] = []
    for raw_stage in description.split(","):
        stage = raw_stage.strip()
        if not stage:
            raise GraphParseError(f"empty stage in filter description {description!r}")
        name, sep, args = stage.partition("=")
        name = name.strip()
        if not name or not name.replace("_", "").isalnum():
            raise GraphParseError(f"invalid filter name {name!r} in {description!r}")
        if sep and not args.strip():
            raise GraphParseError(f"missing arguments for filter {name!r} in {description!r}")
        stages.append((name, args.strip() if sep else None))
    LOG.debug("[GRAPH] parsed %r into %s", description, stages)
    return stages


def output_format(stages: list[tuple[str, str | None]]) -> str | None:
    """Pixel format forced by the last ``format`` stage, if any."""
    for name, args in reversed(stages):
        if name == "format" and args:
            return args.split("|")[0].split(":")[0].strip()
    return None
