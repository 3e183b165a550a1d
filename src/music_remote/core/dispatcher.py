"""
Command Dispatcher

Turns user intent into outbound command envelopes. Every dispatch produces
a notification saying whether the command went out; nothing is retried.
"""

import logging
from typing import Any, Dict, Optional

from music_remote.core.connection import ConnectionManager
from music_remote.core.models import Session
from music_remote.core.store import PlaybackStore
from music_remote.utils.constants import MESSAGES
from music_remote.utils.notifications import (
    Notifier, create_error_notification, create_success_notification, safe_notify
)
from music_remote.utils.protocol import Command, create_command, next_repeat_mode


class CommandDispatcher:
    def __init__(self, connection: ConnectionManager, session: Session,
                 store: PlaybackStore, notifier: Optional[Notifier] = None,
                 logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.connection = connection
        self.session = session
        self.store = store
        self.notifier = notifier

    async def dispatch(self, command: Command, extra: Optional[Dict[str, Any]] = None) -> bool:
        """
        Send a command carrying the current user id

        Args:
            command: Command to send
            extra: Caller payload fields; these override userID on collision

        Returns:
            True if the command was written to the socket
        """
        envelope = create_command(command, self.session.user_id, extra)
        sent = await self.connection.send(envelope)
        if sent:
            self.logger.info(f"Sent {command.value} command: {envelope.payload}")
            notification = create_success_notification(
                MESSAGES['COMMAND_SENT_TITLE'], MESSAGES['COMMAND_SENT'].format(command.value)
            )
        else:
            notification = create_error_notification(
                MESSAGES['NOT_CONNECTED_TITLE'], MESSAGES['NOT_CONNECTED']
            )
        safe_notify(self.notifier, notification, self.logger)
        return sent

    # Intent helpers

    async def play_url(self, url: str) -> bool:
        return await self.dispatch(Command.PLAY, {"trackUrl": url})

    async def play_index(self, index: int) -> bool:
        return await self.dispatch(Command.PLAY, {"index": index})

    async def toggle_pause(self) -> bool:
        # No explicit state: the player flips whatever it is doing
        return await self.dispatch(Command.PAUSE)

    async def skip(self) -> bool:
        return await self.dispatch(Command.SKIP)

    async def back(self) -> bool:
        return await self.dispatch(Command.BACK)

    async def set_volume(self, volume: int) -> bool:
        return await self.dispatch(Command.VOLUME, {"volume": min(max(int(volume), 0), 100)})

    async def toggle_shuffle(self) -> bool:
        return await self.dispatch(Command.SHUFFLE)

    async def cycle_repeat(self) -> bool:
        """Request the repeat mode after the one last reported by the player"""
        mode = next_repeat_mode(self.store.state.repeat_mode)
        return await self.dispatch(Command.LOOP, {"mode": int(mode)})
