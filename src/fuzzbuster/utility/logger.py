import logging
import sys

from tqdm import tqdm

"""
Logger class
"""


class TqdmHandler(logging.Handler):
    """
    Writes records to stderr through tqdm so they don't break an active
    progress bar
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=sys.stderr)
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


class LoggerManager:
    """
    Initalize the logging instance

    All fuzzbuster loggers hang off the "fuzzbuster" logger, which owns the
    single handler.

    Returns:
    - The logger associated with this module
    """

    ROOT = "fuzzbuster"

    def __init__(self, name: str = ROOT, level: int = logging.INFO):
        self.logger = logging.getLogger(name)

        root = logging.getLogger(self.ROOT)
        # Avoid duplicate handlers if logger already has one
        if not root.handlers:
            handler = TqdmHandler()
            formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
            handler.setFormatter(formatter)
            root.addHandler(handler)
            root.setLevel(level)

    def get_logger(self) -> logging.Logger:
        return self.logger
