"""Logging setup for CLI"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler


DEBUG_LOG_FILE = "oidc_client_debug.log"


def setup_logging(console: Console, debug: bool = False, log_level: str = "info") -> None:
    """
    Configure the root logger

    Log records go to the Rich console. With debug enabled everything is
    logged at DEBUG and also appended to a debug log file.

    Args:
        console: Rich console log records are rendered on
        debug: Whether debug mode is enabled
        log_level: Level name used when debug is off
    """
    root_logger = logging.getLogger()
    level = logging.DEBUG if debug else getattr(logging, str(log_level).upper(), logging.INFO)
    root_logger.setLevel(level)

    # Clear existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = RichHandler(console=console, show_path=False)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if debug:
        log_file = os.path.abspath(DEBUG_LOG_FILE)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        root_logger.addHandler(file_handler)
        logging.getLogger(__name__).debug(f"Debug logging enabled - appending to {log_file}")

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)
