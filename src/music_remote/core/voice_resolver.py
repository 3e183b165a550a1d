import logging
from typing import Any, Optional

from music_remote.core.models import VoiceContext
from music_remote.utils.protocol import Envelope, create_get_voice_command, decode_voice_reply


class VoiceResolver:
    """
    Tracks which voice channel and guild the user is in.

    Replies are not correlated with queries: the latest ReplyVoice wins.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._context = VoiceContext()

    @property
    def context(self) -> VoiceContext:
        return self._context

    @property
    def channel_name(self) -> Optional[str]:
        return self._context.channel_name

    def build_query(self, user_id: str) -> Envelope:
        return create_get_voice_command(user_id)

    def handle_reply(self, payload: Any) -> VoiceContext:
        self._context = decode_voice_reply(payload)
        self.logger.info(f"Voice channel: {self._context.channel_name}, "
                         f"guild: {self._context.guild_name}")
        return self._context
