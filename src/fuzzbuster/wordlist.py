import threading

from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from fuzzbuster.errors import ConfigurationError
from fuzzbuster.utility.logger import LoggerManager

"""
Wordlist reading and the shared candidate source
"""

logger = LoggerManager(__name__).get_logger()


class Wordlist:
    """
    Lazily reads a wordlist file, expanding each word with the configured
    extensions

    Args:
    - path (str): Path to the wordlist
    - extensions (List[str]): Extensions without the dot, "" keeps the bare word
    """

    def __init__(self, path: str, extensions: Optional[List[str]] = None) -> None:
        self.path = Path(path)
        if not self.path.is_file():
            raise ConfigurationError(f"Couldn't find wordlist {path}")
        self.set_extensions(extensions or [""])

    def set_extensions(self, extensions: List[str]) -> None:
        suffixes = []
        for ext in extensions:
            ext = ext.strip().lstrip(".")
            suffixes.append(f".{ext}" if ext else "")
        self.suffixes = suffixes or [""]

    def _read(self, warn: bool) -> Iterator[str]:
        """
        Yield every expanded word. Lines that aren't valid UTF-8 are skipped
        rather than sent with replacement characters.

        Args:
        - warn (bool): Log a warning for each skipped line
        """

        with open(self.path, "rb") as f:
            for number, raw in enumerate(f, start=1):
                try:
                    word = raw.decode("utf-8").strip()
                except UnicodeDecodeError:
                    if warn:
                        logger.warning(
                            f"Skipping line {number} of {self.path}: not valid UTF-8"
                        )
                    continue
                if not word:
                    continue
                for suffix in self.suffixes:
                    yield f"{word}{suffix}"

    def __iter__(self) -> Iterator[str]:
        return self._read(warn=True)

    def __len__(self) -> int:
        return sum(1 for _ in self._read(warn=False))


class CandidateSource:
    """
    Hands out candidates to concurrent workers, each exactly once

    Lines are trimmed and empty lines skipped. Once exhausted the source
    stays exhausted.

    Args:
    - lines (Iterable[str]): Any line source, e.g. a Wordlist or a list
    """

    def __init__(self, lines: Iterable[str]) -> None:
        self._lines = iter(lines)
        self._lock = threading.Lock()
        self._exhausted = False
        self.delivered = 0

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def next_candidate(self) -> Optional[str]:
        """
        Pull the next candidate

        Returns:
        - Optional[str]: The candidate, or None once every line was handed out
        """

        with self._lock:
            if self._exhausted:
                return None
            for line in self._lines:
                word = line.strip()
                if word:
                    self.delivered += 1
                    return word
            self._exhausted = True
            return None

    def __iter__(self) -> Iterator[str]:
        while True:
            word = self.next_candidate()
            if word is None:
                return
            yield word
