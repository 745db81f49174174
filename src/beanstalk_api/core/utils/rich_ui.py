"""
Rich console and logging handler shared by the logger and the CLI.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

console = Console()


def is_rich_enabled() -> bool:
    """Check if Rich log output is requested via BEANSTALK_RICH_UI"""
    return os.environ.get("BEANSTALK_RICH_UI", "false").lower() in ("true", "1", "yes")


class RichLoggingFilter(logging.Filter):
    """Filter to suppress chatty HTTP library logs when Rich output is active"""

    def filter(self, record):
        if record.levelno <= logging.INFO and record.name.startswith(
            ("urllib3", "requests")
        ):
            return False
        return True


def get_rich_handler() -> logging.Handler:
    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.addFilter(RichLoggingFilter())
    return handler
