"""Logging setup for the quotation builder and the draft operation logger."""
import logging
import logging.handlers
import os
from pathlib import Path

from quotebuilder.exceptions import BusinessLogicError, ValidationError
from quotebuilder.infrastructure.app_constants import APP_TITLE, LOG_DIR, LOG_FILE_STEM
from quotebuilder.infrastructure.settings import get_app_settings, is_truthy, read_bool

LOG_FORMAT = '%(asctime)s [%(levelname)s] [%(name)s:%(lineno)d] %(message)s'

DEBUG_ENV_VAR = 'QUOTEBUILDER_DEBUG'
LOG_DIR_ENV_VAR = 'QUOTEBUILDER_LOG_DIR'

_MB = 1024 * 1024

# (file suffix, handler level, max bytes, backups, flag that enables it)
_LOG_FILES = (
    ("", logging.INFO, 5 * _MB, 10, "enable_info"),
    ("_error", logging.ERROR, 5 * _MB, 10, "enable_error"),
    ("_debug", logging.DEBUG, 10 * _MB, 5, "enable_debug"),
)

_SETTINGS_FLAGS = {
    "enable_info": ("logging/enable_info", True),
    "enable_error": ("logging/enable_error", True),
    "enable_debug": ("logging/enable_debug", True),
}


def _rotating_handler(path, level, max_bytes, backups, formatter):
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backups, encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(app_name=LOG_FILE_STEM, log_dir=LOG_DIR, debug_mode=False,
                  enable_info=True, enable_error=True, enable_debug=True):
    """
    Route quotation logs to rotating files under ``log_dir`` and to the console.

    Files are ``<app_name>.log`` (INFO+), ``<app_name>_error.log`` (ERROR+) and,
    only while ``debug_mode`` is on, ``<app_name>_debug.log``. The console shows
    warnings, or everything in debug mode. Existing root handlers are detached
    so calling this twice does not duplicate output.

    Returns:
        logging.Logger: the configured root logger
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug_mode else logging.INFO)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)
    enabled = {
        "enable_info": enable_info,
        "enable_error": enable_error,
        "enable_debug": enable_debug and debug_mode,
    }
    for suffix, level, max_bytes, backups, flag in _LOG_FILES:
        if enabled[flag]:
            path = log_path / f"{app_name}{suffix}.log"
            root_logger.addHandler(_rotating_handler(path, level, max_bytes, backups, formatter))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if debug_mode else logging.WARNING)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    root_logger.info("%s logging to %s (debug=%s)", APP_TITLE, log_path.resolve(), debug_mode)
    return root_logger


class QuotationOperation:
    """Context manager that logs a draft mutation and classifies its failure."""

    def __init__(self, operation_name, logger=None):
        self.operation_name = operation_name
        self.logger = logger or logging.getLogger(__name__)
        self.success = False

    def __enter__(self):
        self.logger.debug("Starting quotation operation: %s", self.operation_name)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.logger.debug("Completed quotation operation: %s", self.operation_name)
            self.success = True
            return False

        # Rejected input and unknown ids are expected; anything else is a bug
        if issubclass(exc_type, (ValidationError, BusinessLogicError)):
            self.logger.warning("Rejected %s: %s", self.operation_name, exc_val)
        else:
            self.logger.error(
                "Unexpected error during %s: %s", self.operation_name, exc_val, exc_info=True
            )
        return False


def get_log_config(settings=None):
    """
    Collect the logging options, letting environment variables override QSettings.

    ``QUOTEBUILDER_DEBUG`` overrides ``logging/debug_mode`` and
    ``QUOTEBUILDER_LOG_DIR`` overrides the default log directory. The
    per-file switches only come from settings.

    Returns:
        dict: keyword arguments accepted by :func:`setup_logging`
    """
    settings = settings if settings is not None else get_app_settings()

    if DEBUG_ENV_VAR in os.environ:
        debug_mode = is_truthy(os.environ[DEBUG_ENV_VAR])
    else:
        debug_mode = read_bool(settings, "logging/debug_mode", False)

    config = {
        'debug_mode': debug_mode,
        'log_dir': os.environ.get(LOG_DIR_ENV_VAR, LOG_DIR),
    }
    for option, (key, default) in _SETTINGS_FLAGS.items():
        config[option] = read_bool(settings, key, default)
    return config


def reconfigure_logging(settings=None):
    """Re-apply :func:`get_log_config`; call after the logging settings change."""
    config = get_log_config(settings)
    root_logger = setup_logging(**config)
    root_logger.debug("Logging configuration: %s", config)
    return root_logger
