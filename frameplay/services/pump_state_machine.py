"""Explicit frame pump state machine with strict transition controls."""
from __future__ import annotations

from enum import Enum


class PumpState(str, Enum):
    AWAIT_PACKET = "AWAIT_PACKET"
    DECODING = "DECODING"
    FILTERING = "FILTERING"
    DONE = "DONE"
    FAILED = "FAILED"


class InvalidTransition(RuntimeError):
    pass


_TERMINAL = {PumpState.DONE, PumpState.FAILED}


class PumpStateMachine:
    def __init__(self):
        self._state = PumpState.AWAIT_PACKET

    @property
    def state(self) -> PumpState:
        return self._state

    @property
    def finished(self) -> bool:
        return self._state in _TERMINAL

    def _transition(self, expected: set[PumpState], new_state: PumpState) -> PumpState:
        if self._state not in expected:
            raise InvalidTransition(f"Cannot transition {self._state} -> {new_state}")
        self._state = new_state
        return self._state

    def packet_ready(self) -> PumpState:
        return self._transition({PumpState.AWAIT_PACKET}, PumpState.DECODING)

    def frames_ready(self) -> PumpState:
        return self._transition({PumpState.DECODING}, PumpState.FILTERING)

    def need_input(self) -> PumpState:
        return self._transition(
            {PumpState.AWAIT_PACKET, PumpState.DECODING, PumpState.FILTERING}, PumpState.AWAIT_PACKET
        )

    def mark_done(self) -> PumpState:
        return self._transition({PumpState.AWAIT_PACKET, PumpState.FILTERING}, PumpState.DONE)

    def mark_failed(self) -> PumpState:
        return self._transition(
            {PumpState.AWAIT_PACKET, PumpState.DECODING, PumpState.FILTERING}, PumpState.FAILED
        )
