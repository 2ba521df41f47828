"""Media source opening, best video stream selection and decoder setup."""
from __future__ import annotations

import logging
from dataclasses import dataclass

import av

from frameplay.services.errors import (
    DecodeError,
    DecoderInitError,
    NoVideoStreamError,
    OpenError,
    ProbeError,
    ReadError,
)
from frameplay.services.resolution_planner import ratio_terms

LOG = logging.getLogger(__name__)

# AV_TIME_BASE_Q, used when the container reports no stream time base.
DEFAULT_TIME_BASE = (1, 1_000_000)


@dataclass(frozen=True)
class VideoStreamDescriptor:
    index: int
    width: int
    height: int
    pixel_format: str
    sample_aspect_ratio: tuple[int, int]
    time_base: tuple[int, int]
    codec_name: str = ""


class VideoDecoder:
    """Decoder bound to one stream's codec parameters."""

    def __init__(self, codec_context):
        self._context = codec_context
        self.closed = False

    @property
    def context(self):
        return self._context

    def decode(self, packet) -> list:
        """Return decoded frames; an empty list means more input is needed."""
        try:
            return list(self._context.decode(packet))
        except EOFError:
            # Decoder already drained.
            return []
        except av.error.FFmpegError as exc:
            raise DecodeError(f"Error while decoding a packet: {exc}") from exc

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._context = None


class MediaSource:
    """Open container plus the selected video stream and its decoder."""

    def __init__(self, uri: str, container, stream, decoder: VideoDecoder, descriptor: VideoStreamDescriptor):
        self.uri = uri
        self.descriptor = descriptor
        self.decoder = decoder
        self._container = container
        self._stream = stream
        self._packets = None
        self.closed = False

    def read_packet(self):
        """Next compressed unit of the selected stream, or ``None`` at end of stream.

        The trailing empty unit from the demuxer is passed through so the decoder
        can flush delayed frames.
        """
        if self._packets is None:
            self._packets = self._container.demux(self._stream)
        try:
            return next(self._packets, None)
        except av.error.FFmpegError as exc:
            raise ReadError(f"Error reading frame from input: {exc}") from exc

    def close(self) -> None:
        """Release the decoder then the container (first call only)."""
        if self.closed:
            return
        self.closed = True
        self.decoder.close()
        self._packets = None
        self._container.close()
        LOG.info("[SOURCE] closed %s", self.uri)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def _describe_stream(stream, codec_context) -> VideoStreamDescriptor:
    width = int(codec_context.width or 0)
    height = int(codec_context.height or 0)
    pixel_format = codec_context.pix_fmt
    if width <= 0 or height <= 0 or not pixel_format:
        raise ProbeError(
            f"Cannot find stream information: stream #{stream.index} reports "
            f"{width}x{height} pix_fmt={pixel_format}"
        )
    time_base = ratio_terms(stream.time_base) if stream.time_base else DEFAULT_TIME_BASE
    return VideoStreamDescriptor(
        index=stream.index,
        width=width,
        height=height,
        pixel_format=pixel_format,
        sample_aspect_ratio=ratio_terms(codec_context.sample_aspect_ratio),
        time_base=time_base,
        codec_name=codec_context.name or "",
    )


def _open_decoder(stream) -> VideoDecoder:
    codec_context = stream.codec_context
    if codec_context is None:
        raise DecoderInitError(f"Cannot open video decoder: no decoder for stream #{stream.index}")
    try:
        codec_context.open(strict=False)
    except (av.error.FFmpegError, ValueError) as exc:
        raise DecoderInitError(f"Cannot open video decoder: {exc}") from exc
    return VideoDecoder(codec_context)


def open_source(source_identifier: str, *, options: dict | None = None) -> MediaSource:
    """Open ``source_identifier`` and bind a decoder to its best video stream.

    The container is closed again if any later step fails.
    """
    try:
        container = av.open(source_identifier, mode="r", options=options or {})
    except (av.error.FFmpegError, OSError) as exc:
        raise OpenError(f"Cannot open input file {source_identifier}: {exc}") from exc

    try:
        stream = container.streams.best("video")
        if stream is None:
            raise NoVideoStreamError(f"Cannot find a video stream in the input file {source_identifier}")
        decoder = _open_decoder(stream)
        descriptor = _describe_stream(stream, decoder.context)
    except BaseException:
        container.close()
        raise

    LOG.info(
        "[SOURCE] opened %s: stream #%d codec=%s %dx%d pix_fmt=%s sar=%d/%d time_base=%d/%d",
        source_identifier,
        descriptor.index,
        descriptor.codec_name,
        descriptor.width,
        descriptor.height,
        descriptor.pixel_format,
        *descriptor.sample_aspect_ratio,
        *descriptor.time_base,
    )
    return MediaSource(source_identifier, container, stream, decoder, descriptor)
