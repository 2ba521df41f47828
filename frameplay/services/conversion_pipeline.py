"""Filter graph that scales decoded frames to the character grid in grayscale."""
from __future__ import annotations

import logging

import av

from frameplay.services.errors import (
    FilterPullError,
    FilterPushError,
    FormatNegotiationError,
    GraphConfigError,
    GraphParseError,
)
from frameplay.services.ffmpeg_tools import (
    GRAYSCALE_FORMATS,
    build_buffer_args,
    build_filter_description,
    output_format,
    parse_filter_description,
)
from frameplay.services.frames import ConvertedFrame

LOG = logging.getLogger(__name__)


class ConversionPipeline:
    """buffer -> scale -> format=gray -> buffersink, configured once per stream."""

    def __init__(self, graph, source, sink, descriptor, plan, description: str):
        self.descriptor = descriptor
        self.plan = plan
        self.description = description
        self._graph = graph
        self._source = source
        self._sink = sink
        self.closed = False

    @classmethod
    def configure(cls, descriptor, plan, description: str | None = None) -> "ConversionPipeline":
        description = description or build_filter_description(plan)
        stages = parse_filter_description(description)
        requested = output_format(stages)
        if requested not in GRAYSCALE_FORMATS:
            raise FormatNegotiationError(
                f"Cannot set output pixel format: {requested!r} is not one of {GRAYSCALE_FORMATS}"
            )

        buffer_args = build_buffer_args(descriptor)
        LOG.info("[GRAPH] buffer source: %s", buffer_args)
        LOG.info('[GRAPH] applying filter: "%s"', description)

        graph = av.filter.Graph()
        try:
            source = graph.add("buffer", buffer_args, name="in")
            nodes = [source]
            for name, args in stages:
                nodes.append(graph.add(name, args) if args else graph.add(name))
            sink = graph.add("buffersink", name="out")
            nodes.append(sink)
        except (av.error.FFmpegError, ValueError) as exc:
            raise GraphParseError(f"Cannot parse graph description {description!r}: {exc}") from exc
        except RuntimeError as exc:
            raise GraphConfigError(f"Cannot create filter for {description!r}: {exc}") from exc

        try:
            for upstream, downstream in zip(nodes, nodes[1:]):
                upstream.link_to(downstream)
        except (av.error.FFmpegError, ValueError, RuntimeError) as exc:
            raise GraphConfigError(f"Cannot link filter graph {description!r}: {exc}") from exc

        try:
            graph.configure()
        except (av.error.FFmpegError, ValueError) as exc:
            raise GraphConfigError(f"Cannot configure filter graph: {exc}") from exc

        return cls(graph, source, sink, descriptor, plan, description)

    def push(self, frame) -> None:
        try:
            self._source.push(frame)
        except av.error.FFmpegError as exc:
            raise FilterPushError(f"Error while feeding the filtergraph: {exc}") from exc

    def pull(self) -> ConvertedFrame | None:
        """Next converted frame, or ``None`` when the graph needs more input."""
        try:
            frame = self._sink.pull()
        except (BlockingIOError, EOFError):
            return None
        except av.error.FFmpegError as exc:
            raise FilterPullError(f"Error while pulling from filtergraph: {exc}") from exc

        if frame.format.name not in GRAYSCALE_FORMATS:
            raise FormatNegotiationError(f"filter graph produced {frame.format.name}, expected gray")
        if (frame.width, frame.height) != self.plan.size:
            raise FilterPullError(
                f"filter graph produced {frame.width}x{frame.height}, "
                f"expected {self.plan.target_width}x{self.plan.target_height}"
            )
        return ConvertedFrame.from_av_frame(frame)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._source = None
        self._sink = None
        self._graph = None
        LOG.info("[GRAPH] released filter graph")
