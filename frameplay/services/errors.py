"""Error taxonomy for the single-shot frame pipeline.

Every failure is terminal for the run. ``stage`` names the pipeline step that
raised it so the CLI can report where the run stopped.
"""
from __future__ import annotations


class FramePlayError(RuntimeError):
    """Base class for all pipeline failures."""

    stage = "pipeline"


class OpenError(FramePlayError):
    """Raised when the media source cannot be read or its container parsed."""

    stage = "open"


class ProbeError(FramePlayError):
    """Raised when probing leaves the stream without usable parameters."""

    stage = "probe"


class NoVideoStreamError(FramePlayError):
    """Raised when the container has no video stream."""

    stage = "select"


class DecoderInitError(FramePlayError):
    """Raised when no decoder can be opened for the selected stream."""

    stage = "decoder"


class GraphParseError(FramePlayError):
    """Raised when a filter description is malformed or names an unknown filter."""

    stage = "graph-parse"


class GraphConfigError(FramePlayError):
    """Raised when the filter graph cannot be validated."""

    stage = "graph-config"


class FormatNegotiationError(FramePlayError):
    """Raised when the sink cannot produce grayscale output."""

    stage = "format"


class DecodeError(FramePlayError):
    stage = "decode"


class FilterPushError(FramePlayError):
    stage = "filter-push"


class FilterPullError(FramePlayError):
    stage = "filter-pull"


class ReadError(FramePlayError):
    """Raised when demuxing the next compressed unit fails."""

    stage = "read"


class NoFrameProducedError(FramePlayError):
    """Raised when the source ends before any frame was displayed."""

    stage = "eof"
