"""
Common logging configuration for the cemetery records application
"""

import logging
import os
import sys


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _add_handler(logger: logging.Logger, handler: logging.Handler) -> None:
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def setup_logger(name: str, level: str = "INFO", log_file: str = None) -> logging.Logger:
    """
    Setup a logger with the project's format

    Args:
        name: Logger name (typically __name__)
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file to write to in addition to stdout

    Returns:
        Configured logger instance; an already configured logger is returned as-is
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    _add_handler(logger, logging.StreamHandler(sys.stdout))
    if log_file:
        _add_handler(logger, logging.FileHandler(log_file))
    return logger


def get_project_logger(module_name: str, verbose: bool = False) -> logging.Logger:
    """
    Get a stdout logger for a project module

    The level comes from LOG_LEVEL (default INFO); verbose forces DEBUG.
    """
    level = "DEBUG" if verbose else os.environ.get('LOG_LEVEL', 'INFO')
    return setup_logger(module_name, level)
