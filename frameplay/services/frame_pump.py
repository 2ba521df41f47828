"""Single-shot decode -> convert -> render loop driven by explicit states."""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from frameplay.services.errors import FramePlayError
from frameplay.services.frames import FrameSlots
from frameplay.services.pump_state_machine import PumpState, PumpStateMachine

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class PumpOutcome:
    frame_displayed: bool
    packets_read: int
    frames_decoded: int
    pts: int | None = None


def best_effort_timestamp(frame) -> int | None:
    """Presentation timestamp, falling back to the decode timestamp."""
    if frame.pts is not None:
        return frame.pts
    return getattr(frame, "dts", None)


class FramePump:
    """Pull units from the source until one converted frame has been rendered.

    The pump never owns the source, decoder or pipeline; it only drives them.
    Decoded and converted frames live in ``slots`` and are released as soon as
    the next stage has taken them.
    """

    def __init__(self, source, decoder, pipeline, renderer, slots: FrameSlots | None = None):
        self.source = source
        self.decoder = decoder
        self.pipeline = pipeline
        self.renderer = renderer
        self.slots = slots if slots is not None else FrameSlots()
        self.machine = PumpStateMachine()
        self.packets_read = 0
        self.frames_decoded = 0
        self._stream_index = source.descriptor.index
        self._packet = None
        self._pending: deque = deque()
        self._displayed_pts: int | None = None
        self._displayed = False

    @property
    def state(self) -> PumpState:
        return self.machine.state

    def run(self) -> PumpOutcome:
        handlers = {
            PumpState.AWAIT_PACKET: self._await_packet,
            PumpState.DECODING: self._decode,
            PumpState.FILTERING: self._filter,
        }
        try:
            while not self.machine.finished:
                handlers[self.machine.state]()
        except FramePlayError as exc:
            LOG.info("[PUMP] %s failed in %s: %s", exc.stage, self.machine.state.value, exc)
            self.machine.mark_failed()
            self._pending.clear()
            raise
        return PumpOutcome(
            frame_displayed=self._displayed,
            packets_read=self.packets_read,
            frames_decoded=self.frames_decoded,
            pts=self._displayed_pts,
        )

    def _await_packet(self) -> None:
        packet = self.source.read_packet()
        if packet is None:
            LOG.info("[PUMP] end of stream after %d packets, no frame displayed", self.packets_read)
            self.machine.mark_done()
            return
        if packet.stream_index != self._stream_index:
            return
        self.packets_read += 1
        self._packet = packet
        self.machine.packet_ready()

    def _decode(self) -> None:
        packet, self._packet = self._packet, None
        frames = self.decoder.decode(packet)
        if not frames:
            self.machine.need_input()
            return
        for frame in frames:
            frame.pts = best_effort_timestamp(frame)
            self._pending.append(frame)
        self.frames_decoded += len(frames)
        self.machine.frames_ready()

    def _filter(self) -> None:
        self.slots.hold_raw(self._pending.popleft())
        # The graph takes its own reference during push.
        self.pipeline.push(self.slots.raw)
        self.slots.release_raw()

        converted = self.pipeline.pull()
        if converted is None:
            if not self._pending:
                self.machine.need_input()
            return

        self.slots.hold_converted(converted)
        self.renderer.render(self.slots.converted)
        self._displayed = True
        self._displayed_pts = converted.pts
        self.slots.release_converted()
        self._pending.clear()
        LOG.info("[PUMP] displayed frame pts=%s after %d packets", converted.pts, self.packets_read)
        self.machine.mark_done()
