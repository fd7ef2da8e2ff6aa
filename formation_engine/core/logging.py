import logging
import sys

from .config import settings


def configure_logging(level: str = None) -> None:
    """
    Configure logging for the engine and its host.
    Call this once at process start, before loading any configuration.
    """
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
