"""
Progress Extrapolator

The remote player does not push continuous progress. While the transport is
playing, this advances the local position once per interval; the next
snapshot corrects any drift.
"""

import asyncio
import logging
from typing import Optional

from music_remote.core.models import PlaybackState
from music_remote.core.store import PlaybackStore
from music_remote.utils.constants import TICK_INTERVAL, TICK_QUANTUM_MS


class ProgressExtrapolator:
    def __init__(self, store: PlaybackStore, interval: float = TICK_INTERVAL,
                 quantum_ms: int = TICK_QUANTUM_MS, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.store = store
        self.interval = interval
        self.quantum_ms = quantum_ms
        self._task: Optional[asyncio.Task] = None
        self._attached = False

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def attach(self):
        """Follow the store's transport state. Must be called from a running loop."""
        if self._attached:
            return
        self.store.subscribe(self._on_state_change)
        self._attached = True
        self._apply_gate(self.store.state.is_playing)

    def stop(self):
        """Cancel ticking and stop following the store"""
        if self._attached:
            self.store.unsubscribe(self._on_state_change)
            self._attached = False
        self._cancel()

    def _on_state_change(self, previous: PlaybackState, current: PlaybackState):
        if previous.is_playing != current.is_playing:
            self._apply_gate(current.is_playing)

    def _apply_gate(self, is_playing: bool):
        if is_playing and not self.active:
            self.logger.debug("Starting progress extrapolation")
            self._task = asyncio.get_running_loop().create_task(self._run())
        elif not is_playing:
            self._cancel()

    def _cancel(self):
        if self._task is not None:
            if not self._task.done():
                self.logger.debug("Stopping progress extrapolation")
                self._task.cancel()
            self._task = None

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            self.store.tick(self.quantum_ms)
