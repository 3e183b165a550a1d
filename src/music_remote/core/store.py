"""
Playback State Store

Single source of truth for what the remote player is doing. Only two
writers exist: authoritative snapshots and extrapolation ticks.
"""

import logging
from dataclasses import replace
from typing import Any, Callable, List, Optional

from music_remote.core.models import PlaybackState
from music_remote.utils.constants import TICK_QUANTUM_MS
from music_remote.utils.protocol import decode_snapshot

StateListener = Callable[[PlaybackState, PlaybackState], None]


def reduce_tick(state: PlaybackState, quantum_ms: int = TICK_QUANTUM_MS) -> PlaybackState:
    """Advance progress by one quantum, never past the track duration"""
    return replace(state, progress=state.progress.advanced(quantum_ms))


class PlaybackStore:
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._state = PlaybackState()
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> PlaybackState:
        return self._state

    def subscribe(self, listener: StateListener):
        """Call listener(previous, current) after every commit"""
        self._listeners.append(listener)

    def unsubscribe(self, listener: StateListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def apply_snapshot(self, payload: Any) -> PlaybackState:
        """
        Replace the whole state with a statistics snapshot

        Args:
            payload: Raw statistics payload

        Returns:
            The committed state

        Raises:
            ProtocolError: If the payload is malformed; state is left unchanged
        """
        state = decode_snapshot(payload)
        track = state.current_track.title if state.current_track else None
        self.logger.debug(f"Snapshot: track={track!r} playing={state.is_playing} "
                          f"progress={state.progress.current_ms}/{state.progress.total_ms}")
        return self._commit(state)

    def tick(self, quantum_ms: int = TICK_QUANTUM_MS) -> PlaybackState:
        """Apply one extrapolation tick"""
        return self._commit(reduce_tick(self._state, quantum_ms))

    def _commit(self, state: PlaybackState) -> PlaybackState:
        previous = self._state
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(previous, state)
            except Exception as e:
                self.logger.error(f"Error in state listener: {e}")
        return state
