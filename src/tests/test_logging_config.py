import logging
from logging.handlers import RotatingFileHandler

from music_remote.utils.logging_config import setup_logging


def test_setup_logging_installs_file_and_console_handlers(tmp_path):
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    log_dir = tmp_path / "logs"
    try:
        setup_logging('debug', str(log_dir))
        added = [h for h in root.handlers if h not in before]

        assert root.level == logging.DEBUG
        assert log_dir.is_dir()
        rotating = [h for h in added if isinstance(h, RotatingFileHandler)]
        assert len(rotating) == 1
        assert rotating[0].maxBytes == 10_000_000
        assert rotating[0].backupCount == 5
        assert logging.getLogger('aiohttp').level == logging.INFO
    finally:
        for handler in [h for h in root.handlers if h not in before]:
            root.removeHandler(handler)
            handler.close()
        root.setLevel(level)
