"""Wire the stages together and guarantee ordered teardown."""
from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass

from frameplay.core.settings import PlayerConfig
from frameplay.services.conversion_pipeline import ConversionPipeline
from frameplay.services.errors import NoFrameProducedError
from frameplay.services.ffmpeg_tools import configure_ffmpeg_logging
from frameplay.services.frame_pump import FramePump, PumpOutcome
from frameplay.services.frames import FrameSlots
from frameplay.services.glyph_renderer import GlyphRenderer
from frameplay.services.media_source import VideoStreamDescriptor, open_source
from frameplay.services.resolution_planner import ResolutionPlan, plan_resolution

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaybackReport:
    descriptor: VideoStreamDescriptor
    plan: ResolutionPlan
    outcome: PumpOutcome


def play_first_frame(source_uri: str, config: PlayerConfig | None = None, stream=None) -> PlaybackReport:
    """Decode, convert and render the first frame of ``source_uri``.

    Resources are released in reverse acquisition order on every path:
    pipeline, decoder, source, then frame buffers.
    """
    config = config or PlayerConfig()
    configure_ffmpeg_logging(config.ffmpeg_debug)

    with ExitStack() as stack:
        slots = FrameSlots()
        stack.callback(slots.release)

        source = open_source(source_uri)
        stack.callback(source.close)

        descriptor = source.descriptor
        plan = plan_resolution(
            descriptor.width,
            descriptor.height,
            descriptor.sample_aspect_ratio,
            max_columns=config.max_columns,
            cell_aspect=config.cell_aspect,
        )

        pipeline = ConversionPipeline.configure(descriptor, plan)
        stack.callback(pipeline.close)

        pump = FramePump(source, source.decoder, pipeline, GlyphRenderer(stream), slots)
        outcome = pump.run()
        if not outcome.frame_displayed:
            raise NoFrameProducedError("End of file reached, but no video frame could be displayed.")

    LOG.info(
        "[PLAYER] %s: displayed %dx%d frame (packets=%d decoded=%d)",
        source_uri,
        plan.target_width,
        plan.target_height,
        outcome.packets_read,
        outcome.frames_decoded,
    )
    return PlaybackReport(descriptor=descriptor, plan=plan, outcome=outcome)
