"""
Constants class
"""
from dataclasses import dataclass

from fuzzbuster import __version__


@dataclass
class Constants:
    FUZZ = "FUZZ"
    USER_AGENT = f"fuzzbuster/{__version__}"
    TIMEOUT = 10
    DEFAULT_THREADS = 10
    DEFAULT_METHOD = "GET"
    DEFAULT_FILTER_STATUS_CODES = "404"
    PROGRESS_LOG_INTERVAL = 1000
    POLL_INTERVAL = 0.5
