from dataclasses import dataclass, field
from typing import Optional

from fuzzbuster.config.constants import Constants
from fuzzbuster.errors import ConfigurationError
from fuzzbuster.filters import DEFAULT_FILTERS, FilterSet

"""
Runtime configuration
"""


@dataclass(frozen=True)
class FuzzerRuntimeConfig:
    num_threads: int = Constants.DEFAULT_THREADS
    delay: float = 0.0
    filters: FilterSet = field(default_factory=lambda: DEFAULT_FILTERS)
    verbose: bool = False
    timeout: float = Constants.TIMEOUT
    verify_ssl: bool = False
    proxy: Optional[str] = None
    output_file: Optional[str] = None
    time: Optional[float] = None

    def validate(self) -> "FuzzerRuntimeConfig":
        """
        Reject values that can't run

        Raises:
        - ConfigurationError: On a bad thread count, delay, timeout or time limit
        """

        if self.num_threads is None or self.num_threads < 1:
            raise ConfigurationError(f"Thread count must be at least 1, got {self.num_threads}")
        if self.delay is None or self.delay < 0:
            raise ConfigurationError(f"Delay can't be negative, got {self.delay}")
        if self.timeout is None or self.timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got {self.timeout}")
        if self.time is not None and self.time <= 0:
            raise ConfigurationError(f"Time limit must be positive, got {self.time}")
        return self
