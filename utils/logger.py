"""
Logger utility for Reflex.

Configures and provides logging functionality throughout the application.
"""

import logging
import sys
from datetime import datetime

LOGGER_NAME = 'reflex'


def setup_logger(log_file='reflex.log', verbose=False):
    """
    Set up and configure the logger.

    Args:
        log_file (str): Path to the log file (None disables file logging)
        verbose (bool): Enable verbose logging

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    # Clear any existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode='a')
            file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(levelname)s - [%(threadName)s] %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            logger.addHandler(file_handler)
        except OSError as e:
            print(f"Warning: Could not create log file: {str(e)}")
            print("Logging to console only")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(console_handler)

    logger.info(f"Reflex started at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.info(f"Verbose logging: {'Enabled' if verbose else 'Disabled'}")

    return logger

