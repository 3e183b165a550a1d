"""
WebSocket Protocol for the Music Remote
=======================================

This module defines the envelope protocol spoken with the remote music
player over the WebSocket endpoint.

Message Format:
All messages, in both directions, are JSON-encoded with the structure:
{
    "event": "EVENT_NAME",
    "payload": {...}
}

Commands (Remote -> Player):
- play: Play a track URL ({"trackUrl": ...}) or a queue index ({"index": ...})
- pause: Toggle the transport (the player infers the new state)
- skip / back: Move within the queue
- volume: Set the volume ({"volume": 0-100})
- shuffle: Toggle shuffle
- loop: Set the repeat mode ({"mode": 0|1|2})
- GetVoice: Ask which voice channel the user is in. The payload is the raw
  user id, not an object.

Every command payload except GetVoice carries "userID". Fields supplied by
the caller override it on collision.

Events (Player -> Remote):
- ReplyVoice: {"channel": {...}, "guild": {...}}
- statistics: Full playback snapshot
"""

import json
import logging
from enum import Enum
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict
from urllib.parse import urlparse, urlunparse

from music_remote.core.models import (
    DEFAULT_VOLUME, PlaybackState, Progress, RepeatMode, Track, VoiceContext
)
from music_remote.utils.exceptions import ProtocolError

logger = logging.getLogger(__name__)


class Command(Enum):
    PLAY = "play"
    PAUSE = "pause"
    SKIP = "skip"
    BACK = "back"
    VOLUME = "volume"
    SHUFFLE = "shuffle"
    LOOP = "loop"
    GET_VOICE = "GetVoice"


class Event(Enum):
    REPLY_VOICE = "ReplyVoice"
    STATISTICS = "statistics"


USER_ID_FIELD = "userID"


@dataclass
class Envelope:
    """Wire structure used for both directions"""
    event: str
    payload: Any = None

    def to_json(self) -> str:
        """Convert envelope to JSON string"""
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, json_str: str) -> 'Envelope':
        """
        Create an envelope from a JSON string

        Args:
            json_str: Raw text frame

        Returns:
            Decoded envelope

        Raises:
            ProtocolError: If the frame is not JSON or has no event name
        """
        try:
            data = json.loads(json_str)
        except (TypeError, ValueError) as e:
            raise ProtocolError(f"Inbound frame is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise ProtocolError(f"Inbound frame is not an object: {type(data).__name__}")
        event = data.get("event")
        if not isinstance(event, str):
            raise ProtocolError("Inbound frame has no event name")
        return cls(event=event, payload=data.get("payload"))


def build_payload(user_id: Optional[str], extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Merge the user identity into a command payload.

    The identity goes in first, so a caller field named "userID" replaces it.
    """
    return {USER_ID_FIELD: user_id, **(extra or {})}


def create_command(command: Command, user_id: Optional[str],
                   extra: Optional[Dict[str, Any]] = None) -> Envelope:
    """Create an outbound command envelope"""
    return Envelope(command.value, build_payload(user_id, extra))


def create_get_voice_command(user_id: str) -> Envelope:
    """Create the GetVoice resolver query"""
    return Envelope(Command.GET_VOICE.value, user_id)


def next_repeat_mode(mode: int) -> RepeatMode:
    """Cycle OFF -> TRACK -> QUEUE -> OFF"""
    return RepeatMode((int(mode) + 1) % len(RepeatMode))


def _nested(data: Any, *path: str) -> Any:
    """Follow path through nested mappings, returning None at the first gap"""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _as_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _decode_repeat_mode(value: Any) -> RepeatMode:
    try:
        return RepeatMode(_as_int(value))
    except ValueError:
        logger.warning(f"Unknown repeat mode {value!r}, treating as off")
        return RepeatMode.OFF


def decode_snapshot(payload: Any) -> PlaybackState:
    """
    Decode a statistics payload into a PlaybackState

    Args:
        payload: The "payload" member of a statistics event

    Returns:
        New PlaybackState; a pure function of the payload

    Raises:
        ProtocolError: If the payload is not an object
    """
    if not isinstance(payload, dict):
        raise ProtocolError(f"statistics payload is not an object: {type(payload).__name__}")

    # timestamp.current.current.value is the position; every segment may be absent
    current_ms = _nested(payload, "timestamp", "current", "current", "value")
    total_ms = _nested(payload, "timestamp", "total")
    total = max(_as_int(total_ms), 0)
    current = min(max(_as_int(current_ms), 0), total)

    queue = payload.get("queue")
    if not isinstance(queue, list):
        queue = []
    playlist = tuple(t for t in (Track.from_dict(item) for item in queue) if t is not None)

    volume = payload.get("volume")
    volume = DEFAULT_VOLUME if volume is None else min(max(_as_int(volume, DEFAULT_VOLUME), 0), 100)

    return PlaybackState(
        current_track=Track.from_dict(payload.get("track")),
        playlist=playlist,
        is_playing=not payload.get("paused"),
        volume=volume,
        progress=Progress(current_ms=current, total_ms=total),
        repeat_mode=_decode_repeat_mode(payload.get("repeatMode")),
        shuffle=bool(payload.get("shuffle")),
    )


def decode_voice_reply(payload: Any) -> VoiceContext:
    """Decode a ReplyVoice payload; missing members become None"""
    if not isinstance(payload, dict):
        raise ProtocolError(f"ReplyVoice payload is not an object: {type(payload).__name__}")
    channel = payload.get("channel")
    guild = payload.get("guild")
    return VoiceContext(
        channel=channel if isinstance(channel, dict) else None,
        guild=guild if isinstance(guild, dict) else None,
    )


def endpoint_url(origin: str, path: str = "/api/ws") -> str:
    """
    Derive the WebSocket URL from the hosting origin.

    An https origin yields wss, anything else yields ws. Host and port are kept.
    """
    parsed = urlparse(origin)
    scheme = "wss" if parsed.scheme == "https" else "ws"
    return urlunparse((scheme, parsed.netloc, path, "", "", ""))
