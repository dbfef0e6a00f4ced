"""Logging configuration with console and rotating file handlers"""
import glob
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Session log files kept on disk (current one included)
LOG_RETENTION = 5


def _cleanup_old_logs(log_path: Path, keep: int) -> None:
    """Delete the oldest session logs so that at most `keep` remain after startup."""
    pattern = str(log_path.parent / f"{log_path.stem}_*.log")
    existing_logs = sorted(glob.glob(pattern), reverse=True)  # Newest first
    for old_log in existing_logs[keep - 1:]:
        try:
            Path(old_log).unlink()
        except OSError:
            logging.getLogger(__name__).debug(f"Could not remove old log file {old_log}")


def setup_logging(
    log_file: str = "logs/note-ranker.log",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Configure root logging for the ranking service.
    
    - Console: brief `LEVEL: message` lines at `console_level`
    - File: detailed lines at `file_level`, one timestamped file per process
      start, rotated at 10MB, last LOG_RETENTION sessions kept
    
    Args:
        log_file: Base path of the log file (session timestamp is appended)
        console_level: Console logging level
        file_level: File logging level
    
    Returns:
        Path of the session log file
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    _cleanup_old_logs(log_path, LOG_RETENTION)
    
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    session_log = log_path.parent / f"{log_path.stem}_{timestamp}.log"
    
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Handlers do the filtering
    root_logger.handlers.clear()
    
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    
    file_handler = RotatingFileHandler(
        session_log,
        mode='a',
        maxBytes=10 * 1024 * 1024,
        backupCount=10,
        encoding='utf-8'
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)
    
    # Provider SDKs are chatty on INFO
    for noisy in ("uvicorn.access", "httpx", "httpcore", "openai", "sentence_transformers"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    
    logging.info(
        f"Logging configured: console={logging.getLevelName(console_level)}, "
        f"file={session_log} ({logging.getLevelName(file_level)})"
    )
    return session_log
