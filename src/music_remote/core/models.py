"""
Data structures shared by the synchronizer components
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Dict, Any, Tuple, Union


class RepeatMode(IntEnum):
    OFF = 0
    TRACK = 1
    QUEUE = 2


@dataclass(frozen=True)
class Lyrics:
    plain_lyrics: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['Lyrics']:
        if not isinstance(data, dict):
            return None
        return cls(plain_lyrics=data.get('plainLyrics') or "")


@dataclass(frozen=True)
class Track:
    """A track as pushed by the remote player. Replaced wholesale, never edited."""
    title: str = ""
    url: str = ""
    thumbnail: Optional[str] = None
    # Display string ("3:45") or integer milliseconds, whichever the remote sends
    duration: Union[str, int, None] = None
    lyrics: Optional[Lyrics] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['Track']:
        """
        Build a Track from a remote mapping, ignoring unknown keys.

        Args:
            data: Raw track mapping, or None

        Returns:
            Track instance, or None when data is not a mapping
        """
        if not isinstance(data, dict):
            return None
        return cls(
            title=data.get('title') or "",
            url=data.get('url') or "",
            thumbnail=data.get('thumbnail'),
            duration=data.get('duration'),
            lyrics=Lyrics.from_dict(data.get('lyrics')),
        )


@dataclass(frozen=True)
class Progress:
    current_ms: int = 0
    total_ms: int = 0

    def advanced(self, quantum_ms: int) -> 'Progress':
        """Return a copy moved forward by quantum_ms, clamped to total_ms."""
        return Progress(min(self.current_ms + quantum_ms, self.total_ms), self.total_ms)


DEFAULT_VOLUME = 50


@dataclass(frozen=True)
class PlaybackState:
    current_track: Optional[Track] = None
    playlist: Tuple[Track, ...] = ()
    is_playing: bool = False
    volume: int = DEFAULT_VOLUME
    progress: Progress = field(default_factory=Progress)
    repeat_mode: RepeatMode = RepeatMode.OFF
    shuffle: bool = False


@dataclass(frozen=True)
class VoiceContext:
    channel: Optional[Dict[str, Any]] = None
    guild: Optional[Dict[str, Any]] = None

    @property
    def channel_name(self) -> Optional[str]:
        if self.channel:
            return self.channel.get('name')
        return None

    @property
    def guild_name(self) -> Optional[str]:
        if self.guild:
            return self.guild.get('name')
        return None


@dataclass
class SessionUser:
    id: str
    image_url: Optional[str] = None


@dataclass
class Session:
    """User identity supplied by the authentication layer"""
    user: Optional[SessionUser] = None
    access_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and bool(self.user.id)

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None
