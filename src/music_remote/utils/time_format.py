from music_remote.core.models import Progress


def format_time(ms: int) -> str:
    """
    Render a position in milliseconds as HH:MM:SS.

    Hours wrap at 24, matching the player's own display.

    Args:
        ms: Position in milliseconds

    Returns:
        Zero-padded time string
    """
    ms = max(int(ms), 0)
    seconds = (ms // 1000) % 60
    minutes = (ms // (1000 * 60)) % 60
    hours = (ms // (1000 * 60 * 60)) % 24
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def progress_percent(progress: Progress) -> float:
    """Completion as 0-100; 0 when the duration is unknown"""
    if progress.total_ms <= 0:
        return 0.0
    return progress.current_ms / progress.total_ms * 100
