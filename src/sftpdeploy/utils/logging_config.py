"""Logging configuration for the SFTP deployment tool.

Three files are written below the log directory:

- ``sftpdeploy.log``: everything at the file level, rotated at midnight
- ``sftpdeploy_transfers.log``: only the ``sftpdeploy.sftp`` loggers, rotated by size
- ``sftpdeploy_performance.log``: one summary line per finished transfer
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

TRANSFER_LOGGER = 'sftpdeploy.sftp'
PERFORMANCE_LOGGER = 'performance'

FILE_FORMAT = '[%(asctime)s] [%(levelname)-8s] [%(name)s:%(lineno)d] [PID:%(process)d] - %(message)s'
CONSOLE_FORMAT = '[%(asctime)s] [%(levelname)-8s] - %(message)s'


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _level(name: str) -> int:
    return getattr(logging, name.upper())


class LoggingManager:
    """Owns the handlers for one run of the tool."""

    def __init__(self, log_dir: str, app_name: str = "sftpdeploy"):
        """Initialize the logging manager.

        Args:
            log_dir: Directory to store log files, created if missing
            app_name: Prefix of the log file names
        """
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.main_log_file = self.log_dir / f"{app_name}.log"
        self.transfer_log_file = self.log_dir / f"{app_name}_transfers.log"
        self.performance_log_file = self.log_dir / f"{app_name}_performance.log"

        self.console_level = logging.INFO
        self.performance_logger: Optional[logging.Logger] = None

    def setup_logging(self,
                     console_level: str = "INFO",
                     file_level: str = "DEBUG",
                     enable_colors: bool = True,
                     verbose: bool = False,
                     max_file_size: int = 10 * 1024 * 1024,
                     backup_count: int = 5) -> None:
        """Replace the root handlers with console and file logging.

        Args:
            console_level: Logging level for console output
            file_level: Logging level for the main log file
            enable_colors: Color the console level names when stdout is a terminal
            verbose: Show per-file transfer lines on the console even when
                ``console_level`` is quieter, and keep directory checks in the transfer log
            max_file_size: Size at which the transfer and performance logs rotate
            backup_count: Number of rotated files to keep
        """
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        root_logger.setLevel(logging.DEBUG)

        self.console_level = _level(console_level)
        if verbose:
            self.console_level = min(self.console_level, logging.INFO)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.console_level)
        if enable_colors and sys.stdout.isatty():
            console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
        else:
            console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
        root_logger.addHandler(console_handler)

        file_formatter = logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

        try:
            main_handler = logging.handlers.TimedRotatingFileHandler(
                self.main_log_file, when='midnight', backupCount=30, encoding='utf-8'
            )
            main_handler.setLevel(_level(file_level))
            main_handler.setFormatter(file_formatter)
            root_logger.addHandler(main_handler)
        except OSError as e:
            print(f"Warning: Could not set up main log file: {e}", file=sys.stderr)

        transfer_logger = logging.getLogger(TRANSFER_LOGGER)
        for handler in transfer_logger.handlers[:]:
            transfer_logger.removeHandler(handler)
            handler.close()
        try:
            transfer_handler = logging.handlers.RotatingFileHandler(
                self.transfer_log_file, maxBytes=max_file_size,
                backupCount=backup_count, encoding='utf-8'
            )
            transfer_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
            transfer_handler.setFormatter(file_formatter)
            transfer_logger.addHandler(transfer_handler)
        except OSError as e:
            print(f"Warning: Could not set up transfer log file: {e}", file=sys.stderr)

        self.performance_logger = logging.getLogger(PERFORMANCE_LOGGER)
        self.performance_logger.propagate = False
        self.performance_logger.setLevel(logging.INFO)
        for handler in self.performance_logger.handlers[:]:
            self.performance_logger.removeHandler(handler)
            handler.close()
        try:
            performance_handler = logging.handlers.RotatingFileHandler(
                self.performance_log_file, maxBytes=max_file_size,
                backupCount=backup_count, encoding='utf-8'
            )
            performance_handler.setFormatter(
                logging.Formatter('[%(asctime)s] [PERF] - %(message)s', datefmt='%Y-%m-%d %H:%M:%S')
            )
            self.performance_logger.addHandler(performance_handler)
        except OSError as e:
            print(f"Warning: Could not set up performance log file: {e}", file=sys.stderr)

        # paramiko logs every packet exchange at DEBUG
        logging.getLogger('paramiko').setLevel(logging.WARNING)
        logging.getLogger('paramiko.transport').setLevel(logging.ERROR)

        logger = logging.getLogger(__name__)
        logger.debug(f"Logging initialized - Console: {logging.getLevelName(self.console_level)}, "
                     f"File: {file_level}, verbose: {verbose}")
        logger.debug(f"Log directory: {self.log_dir}")

    def log_performance(self, operation: str, duration: float, **counters) -> None:
        """Write one ``operation: 1.234s | key=value, ...`` line to the performance log."""
        if self.performance_logger is None:
            return
        line = f"{operation}: {duration:.3f}s"
        if counters:
            line += " | " + ", ".join(f"{k}={v}" for k, v in counters.items())
        self.performance_logger.info(line)


def setup_logging(log_dir: str,
                 console_level: str = "INFO",
                 file_level: str = "DEBUG",
                 enable_colors: bool = True,
                 verbose: bool = False) -> LoggingManager:
    """Convenience function to set up logging.

    Returns:
        Configured LoggingManager instance
    """
    manager = LoggingManager(log_dir)
    manager.setup_logging(
        console_level=console_level,
        file_level=file_level,
        enable_colors=enable_colors,
        verbose=verbose
    )
    return manager
