"""
Music Remote Entry Point
========================

Line-oriented console for controlling the remote music player. It keeps a
synchronizer running in the background and maps typed commands onto the
command dispatcher.

Usage: music-remote [--config path/to/config.yaml]

Commands:
    play <url>      Play a track URL
    play #<n>       Jump to queue entry n
    pick <n>        Play search result n
    pause           Toggle pause
    skip / back     Next / previous track
    vol <0-100>     Set the volume
    shuffle         Toggle shuffle
    loop            Cycle the repeat mode
    search <query>  Search for tracks
    now             Show the current track and progress
    queue           Show the queue
    lyrics          Show lyrics for the current track
    voice           Show the voice channel
    quit            Exit
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import Callable, List, Optional

from music_remote.core.models import RepeatMode, Session, SessionUser, Track
from music_remote.core.synchronizer import PlaybackSynchronizer
from music_remote.utils.config import load_config
from music_remote.utils.constants import MESSAGES
from music_remote.utils.exceptions import ConfigError, SearchError
from music_remote.utils.logging_config import setup_logging
from music_remote.utils.notifications import create_error_notification, safe_notify
from music_remote.utils.search import SearchClient
from music_remote.utils.time_format import format_time, progress_percent

logger = logging.getLogger("music_remote")


def build_session(config: dict) -> Optional[Session]:
    """Session from configuration; None when no user is configured"""
    if not config.get('user_id'):
        return None
    return Session(
        user=SessionUser(id=config['user_id'], image_url=config.get('user_image_url')),
        access_token=config.get('access_token'),
    )


def _describe_track(track: Track) -> str:
    if track.duration is None:
        return track.title
    if isinstance(track.duration, int):
        return f"{track.title} ({format_time(track.duration)})"
    return f"{track.title} ({track.duration})"


class RemoteConsole:
    """Maps typed commands onto the synchronizer"""

    def __init__(self, synchronizer: PlaybackSynchronizer, search_client: SearchClient,
                 output: Callable[[str], None] = print):
        self.sync = synchronizer
        self.search_client = search_client
        self.output = output
        self.search_results: List[Track] = []

    async def handle_line(self, line: str) -> bool:
        """
        Execute one command line

        Args:
            line: Raw input line

        Returns:
            False when the user asked to quit
        """
        command, _, argument = line.strip().partition(' ')
        command = command.lower()
        argument = argument.strip()
        dispatcher = self.sync.dispatcher

        if not command:
            return True
        if command in ('quit', 'exit'):
            return False

        if command == 'play':
            if argument.startswith('#') and argument[1:].isdigit():
                await dispatcher.play_index(int(argument[1:]) - 1)
            elif argument:
                await dispatcher.play_url(argument)
            else:
                self.output("Usage: play <url> | play #<n>")
        elif command == 'pick':
            if argument.isdigit() and 1 <= int(argument) <= len(self.search_results):
                await dispatcher.play_url(self.search_results[int(argument) - 1].url)
            else:
                self.output("Usage: pick <n> (after a search)")
        elif command == 'pause':
            await dispatcher.toggle_pause()
        elif command == 'skip':
            await dispatcher.skip()
        elif command == 'back':
            await dispatcher.back()
        elif command in ('vol', 'volume'):
            if argument.isdigit():
                await dispatcher.set_volume(int(argument))
            else:
                self.output(f"Volume: {self.sync.state.volume}")
        elif command == 'shuffle':
            await dispatcher.toggle_shuffle()
        elif command == 'loop':
            await dispatcher.cycle_repeat()
        elif command == 'search':
            await self.search(argument)
        elif command == 'now':
            self.output(self.render_now_playing())
        elif command == 'queue':
            self.output(self.render_queue())
        elif command == 'lyrics':
            self.output(self.render_lyrics())
        elif command == 'voice':
            self.output(self.render_voice())
        else:
            self.output(f"Unknown command: {command}")
        return True

    async def search(self, query: str):
        if not query:
            self.output("Usage: search <query>")
            return
        try:
            self.search_results = await self.search_client.search(query)
        except SearchError as e:
            safe_notify(self.sync.notifier, create_error_notification(
                MESSAGES['SEARCH_ERROR_TITLE'], e.message or MESSAGES['SEARCH_FALLBACK']
            ))
            return
        if not self.search_results:
            self.output("No results.")
            return
        for number, track in enumerate(self.search_results, start=1):
            self.output(f"{number:>2}. {_describe_track(track)}")

    def render_now_playing(self) -> str:
        state = self.sync.state
        if state.current_track is None:
            return MESSAGES['NOTHING_PLAYING']
        progress = state.progress
        status = "Playing" if state.is_playing else "Paused"
        channel = self.sync.voice.channel_name
        where = f" in {channel}" if channel else ""
        flags = []
        if state.shuffle:
            flags.append("shuffle")
        if state.repeat_mode is not RepeatMode.OFF:
            flags.append(f"repeat {state.repeat_mode.name.lower()}")
        extra = f" [{', '.join(flags)}]" if flags else ""
        return (f"{status}{where}: {state.current_track.title} "
                f"{format_time(progress.current_ms)} / {format_time(progress.total_ms)} "
                f"({progress_percent(progress):.0f}%) vol {state.volume}{extra}")

    def render_queue(self) -> str:
        playlist = self.sync.state.playlist
        if not playlist:
            return MESSAGES['QUEUE_EMPTY']
        return "\n".join(
            f"{number:>2}. {_describe_track(track)}"
            for number, track in enumerate(playlist, start=1)
        )

    def render_lyrics(self) -> str:
        track = self.sync.state.current_track
        if track is None:
            return MESSAGES['NOTHING_PLAYING']
        if track.lyrics is None or not track.lyrics.plain_lyrics:
            return MESSAGES['NO_LYRICS']
        return track.lyrics.plain_lyrics

    def render_voice(self) -> str:
        voice = self.sync.voice
        if voice.channel_name is None:
            return "Not in a voice channel"
        if voice.guild_name:
            return f"{voice.channel_name} ({voice.guild_name})"
        return voice.channel_name

    async def run(self, stop_event: asyncio.Event, reader: Optional[asyncio.StreamReader] = None):
        """Read commands until quit, EOF or stop_event"""
        if reader is None:
            reader = asyncio.StreamReader()
            loop = asyncio.get_running_loop()
            await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)

        stopped = asyncio.ensure_future(stop_event.wait())
        try:
            while True:
                read = asyncio.ensure_future(reader.readline())
                done, _ = await asyncio.wait({read, stopped}, return_when=asyncio.FIRST_COMPLETED)
                if stopped in done:
                    read.cancel()
                    break
                line = read.result()
                if not line:
                    break
                if not await self.handle_line(line.decode('utf-8', errors='replace')):
                    break
        finally:
            stopped.cancel()


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = argparse.ArgumentParser(prog="music-remote", description="Remote control for the music bot")
    parser.add_argument('--config', help="Path to config.yaml")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 1

    setup_logging(config['log_level'], config['log_dir'])

    synchronizer = PlaybackSynchronizer(config, build_session(config))
    if not synchronizer.start():
        print(MESSAGES['LOGIN_REQUIRED'])
        return 0

    logger.info(f"Music remote running against {config['origin']}")

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            pass

    try:
        async with SearchClient(config['origin'], config['search_base']) as search_client:
            await RemoteConsole(synchronizer, search_client).run(stop_event)
    finally:
        await synchronizer.stop()

    return 0


def run():
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
