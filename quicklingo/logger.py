import json
import logging
from pathlib import Path

LOG_DIR = Path(__file__).parent.parent / "logs"
LOG_FILE = LOG_DIR / "app.log"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_MODES = ('off', 'info', 'debug')

# Cache for log mode to avoid repeated database reads
_log_mode_cache = None

# Names of loggers handed out by get_logger
_managed_loggers = set()


def _get_log_mode():
    """Get log mode from the stored configuration."""
    global _log_mode_cache
    if _log_mode_cache is not None:
        return _log_mode_cache

    # Read the stored config directly: quicklingo.config logs through us
    from quicklingo.core import database as db

    if not db.DB_FILE.exists():
        return 'off'

    try:
        raw = db.get_app_config('config')
        log_mode = json.loads(raw).get('log_mode', 'off') if raw else 'off'
    except Exception:
        # Unreadable storage: stay quiet rather than fail at import time
        return 'off'

    if log_mode not in LOG_MODES:
        log_mode = 'off'
    _log_mode_cache = log_mode
    return log_mode


def _apply_log_mode(logger: logging.Logger, log_mode: str) -> None:
    """Set level and handlers of *logger* for *log_mode*."""
    if log_mode == 'debug':
        level = logging.DEBUG
    elif log_mode == 'off':
        # Higher than CRITICAL disables everything
        level = logging.CRITICAL + 1
    else:
        level = logging.INFO
    logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)
    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    console_handlers = [
        h for h in logger.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]

    if log_mode == 'off':
        for handler in file_handlers:
            handler.close()
            logger.removeHandler(handler)
    elif not file_handlers:
        LOG_DIR.mkdir(exist_ok=True)
        f_handler = logging.FileHandler(LOG_FILE, encoding='utf-8')
        f_handler.setLevel(logging.DEBUG)
        f_handler.setFormatter(formatter)
        logger.addHandler(f_handler)

    if not console_handlers:
        c_handler = logging.StreamHandler()
        c_handler.setFormatter(formatter)
        logger.addHandler(c_handler)
        console_handlers = [c_handler]
    for handler in console_handlers:
        handler.setLevel(level)


def refresh_log_mode():
    """Clear the log mode cache and re-apply it to every logger (call after a config update)."""
    global _log_mode_cache
    _log_mode_cache = None

    log_mode = _get_log_mode()
    for name in list(_managed_loggers):
        _apply_log_mode(logging.getLogger(name), log_mode)


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    _apply_log_mode(logger, _get_log_mode())
    _managed_loggers.add(name)
    return logger
