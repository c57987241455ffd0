"""Logging setup with a rotating log file in the XDG state directory."""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def default_log_dir() -> Path:
    xdg_state_home = os.environ.get('XDG_STATE_HOME', str(Path.home() / '.local' / 'state'))
    return Path(xdg_state_home) / 'typeracer'


def setup_logging(log_dir: Optional[Path] = None, debug: bool = False,
                  console: bool = True) -> logging.Logger:
    """Configure the 'typeracer' logger.

    Args:
        log_dir: Directory for typeracer.log (XDG state dir if None)
        debug: Log at DEBUG instead of INFO
        console: Also log to stderr

    Returns:
        The 'typeracer' logger
    """
    log_dir = Path(log_dir) if log_dir else default_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    # 5MB max, keep 5 backups
    file_handler = RotatingFileHandler(
        log_dir / 'typeracer.log',
        maxBytes=5*1024*1024,
        backupCount=5
    )
    handlers: list[logging.Handler] = [file_handler]
    if console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT)
    log = logging.getLogger('typeracer')
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        log.addHandler(handler)

    log.setLevel(logging.DEBUG if debug else logging.INFO)
    return log
