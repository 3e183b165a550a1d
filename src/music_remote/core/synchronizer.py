"""
Playback state synchronizer that wires all components together.
"""

import logging
from typing import Any, Optional

import aiohttp

from music_remote.core.connection import ConnectionManager
from music_remote.core.dispatcher import CommandDispatcher
from music_remote.core.extrapolator import ProgressExtrapolator
from music_remote.core.models import PlaybackState, Session, VoiceContext
from music_remote.core.store import PlaybackStore
from music_remote.core.voice_resolver import VoiceResolver
from music_remote.utils.constants import RECONNECT_DELAY, TICK_INTERVAL, WS_PATH
from music_remote.utils.notifications import LoggingNotifier, Notifier
from music_remote.utils.protocol import Event, endpoint_url

logger = logging.getLogger(__name__)


class PlaybackSynchronizer:
    """
    Keeps a local PlaybackState in step with the remote player

    Owns the connection, the store, the extrapolator and the voice resolver.
    Presentation code reads `state` and `voice` and issues commands through
    `dispatcher`.
    """

    def __init__(self, config: dict, session: Optional[Session],
                 notifier: Optional[Notifier] = None,
                 http_session: Optional[aiohttp.ClientSession] = None):
        self.config = config
        self.session = session or Session()
        self.notifier = notifier or LoggingNotifier()
        self.started = False

        headers = {}
        if self.session.access_token:
            headers['Authorization'] = f"Bearer {self.session.access_token}"

        self.store = PlaybackStore()
        self.voice_resolver = VoiceResolver()
        self.extrapolator = ProgressExtrapolator(
            self.store, interval=config.get('tick_interval', TICK_INTERVAL)
        )
        self.connection = ConnectionManager(
            endpoint_url(config['origin'], config.get('ws_path', WS_PATH)),
            http_session=http_session,
            headers=headers,
            reconnect_delay=config.get('reconnect_delay', RECONNECT_DELAY),
            notifier=self.notifier,
        )
        self.dispatcher = CommandDispatcher(
            self.connection, self.session, self.store, self.notifier
        )

        self.connection.register_event_handler(Event.REPLY_VOICE.value, self._on_reply_voice)
        self.connection.register_event_handler(Event.STATISTICS.value, self._on_statistics)
        self.connection.register_open_callback(self._on_open)

    @property
    def state(self) -> PlaybackState:
        return self.store.state

    @property
    def voice(self) -> VoiceContext:
        return self.voice_resolver.context

    def can_start(self) -> bool:
        if not self.session.is_authenticated:
            return False
        if self.config.get('require_access_token', True) and not self.session.access_token:
            return False
        return True

    def start(self) -> bool:
        """
        Connect and begin following the remote player

        Returns:
            False, without connecting, when there is no usable session
        """
        if not self.can_start():
            logger.info("No active session, not connecting")
            return False
        if self.started:
            return True
        self.extrapolator.attach()
        self.connection.start()
        self.started = True
        logger.info(f"Synchronizer started for user {self.session.user_id}")
        return True

    async def stop(self):
        """Stop ticking, close the socket if open and cancel any pending reconnect"""
        self.extrapolator.stop()
        await self.connection.stop()
        self.started = False
        logger.info("Synchronizer stopped")

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()

    # Connection callbacks

    async def _on_open(self):
        await self.connection.send(self.voice_resolver.build_query(self.session.user_id))

    def _on_reply_voice(self, payload: Any):
        self.voice_resolver.handle_reply(payload)

    def _on_statistics(self, payload: Any):
        self.store.apply_snapshot(payload)
