# numberexplorer/LoggingSetup.py
"""
Logging configuration for Number Explorer.

Session transitions happen on the Tk thread, transcription worker threads and
restart timer threads, so every record carries its thread name. Verbose mode
raises only the numberexplorer loggers to DEBUG; third-party loggers
(onnxruntime, onnx_asr) stay at INFO.
"""
import io
import sys
import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler

LOG_FILE_NAME = "number_explorer.log"
LOG_FORMAT = '[%(asctime)s] [%(levelname)s] [%(threadName)s] %(name)s: %(message)s'
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5
APP_LOGGER_NAME = "numberexplorer"


def _reconfigure_console_utf8() -> None:
    # Chinese labels appear in log lines; Windows consoles default to a code page
    if hasattr(sys.stdout, 'buffer'):
        sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8', errors='replace', line_buffering=True)
        sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8', errors='replace', line_buffering=True)


def setup_logging(logs_dir: Path, verbose: bool = False, console: bool = True) -> Path:
    """
    Route all log records to a rotating file and, optionally, the console.

    Args:
        logs_dir: Directory to store log files; created if missing
        verbose: If True, numberexplorer loggers log at DEBUG
        console: If False, skip the console handler (no terminal attached)

    Returns:
        Path of the log file
    """
    logs_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.handlers.clear()

    app_level = logging.DEBUG if verbose else logging.INFO
    logging.getLogger(APP_LOGGER_NAME).setLevel(app_level)

    formatter = logging.Formatter(LOG_FORMAT)

    log_file = logs_dir / LOG_FILE_NAME
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    if console:
        _reconfigure_console_utf8()
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    logging.getLogger(APP_LOGGER_NAME).info(
        "Logging initialized: %s, level=%s, console=%s",
        log_file, logging.getLevelName(app_level), console
    )
    return log_file
