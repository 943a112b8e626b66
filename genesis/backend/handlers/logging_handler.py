"""
LoggingHandler module.

Every backend module logs through ``logging.getLogger(__name__)``, so all
records end up under the ``genesis`` package logger. The frontend calls
``setup_app_logger`` once at startup to give that logger its handlers:

    <data dir>/logs/genesis-cli.log     everything at the chosen level
    stderr                              errors only
"""

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

APP_LOGGER_NAME = "genesis"
GENERAL_LOG_FILE = "genesis-cli.log"
LOG_BACKUP_COUNT = 5
MAX_LOG_BYTES = 1024 * 1024

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'


class LoggingHandler:
    """
    Log directory management and logger wiring for the launcher.

    Usage:
        LoggingHandler().setup_app_logger(logging.INFO)
    """

    def __init__(self, log_dir: Optional[Path] = None):
        if log_dir is None:
            from genesis.shared.paths import get_logs_dir
            log_dir = get_logs_dir()
        self.log_dir = Path(log_dir)
        self.ensure_log_directory()

    def ensure_log_directory(self) -> None:
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            print(f"Failed to create log directory {self.log_dir}: {e}")

    def log_path(self, log_file: Optional[str] = None) -> Path:
        return self.log_dir / (log_file or GENERAL_LOG_FILE)

    def rotate_log_file_per_run(self, log_file_path: Path, backup_count: int = LOG_BACKUP_COUNT):
        """
        Start every run with an empty log: file.log -> file.log.1 -> ... ->
        file.log.<backup_count>, dropping the oldest. Must run before a file
        handler is attached to log_file_path.
        """
        if not log_file_path.exists():
            return
        backups = [log_file_path.with_suffix(f"{log_file_path.suffix}.{i}") for i in range(1, backup_count + 1)]
        if backups[-1].exists():
            backups[-1].unlink()
        for older, newer in zip(reversed(backups[:-1]), reversed(backups[1:])):
            if older.exists():
                older.rename(newer)
        log_file_path.rename(backups[0])

    def setup_logger(self, name: str, log_file: Optional[str] = None,
                     level: int = logging.DEBUG) -> logging.Logger:
        """
        Attach an ERROR-level console handler and a rotating file handler to
        the named logger. Calling it again for the same logger and file does
        not duplicate handlers.
        """
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = False

        if not any(type(h) is logging.StreamHandler for h in logger.handlers):
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.ERROR)
            console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
            logger.addHandler(console_handler)

        file_path = self.log_path(log_file)
        already_attached = any(
            isinstance(h, logging.handlers.RotatingFileHandler) and h.baseFilename == os.path.abspath(file_path)
            for h in logger.handlers
        )
        if not already_attached:
            file_handler = logging.handlers.RotatingFileHandler(
                file_path, mode='a', encoding='utf-8', maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUP_COUNT
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            logger.addHandler(file_handler)

        return logger

    def setup_app_logger(self, level: int = logging.WARNING, rotate: bool = True) -> logging.Logger:
        """Wire the package logger to genesis-cli.log, rotating the previous run's log first."""
        if rotate and not logging.getLogger(APP_LOGGER_NAME).handlers:
            self.rotate_log_file_per_run(self.log_path())
        return self.setup_logger(APP_LOGGER_NAME, GENERAL_LOG_FILE, level)
