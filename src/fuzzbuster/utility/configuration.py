from typing import Iterable, List, Optional, Tuple
from urllib.parse import urlparse

from fuzzbuster.errors import ConfigurationError
from fuzzbuster.filters import (
    DEFAULT_FILTERS,
    FilterBody,
    FilterContentLength,
    FilterSet,
    parse_status_codes,
)
from fuzzbuster.models import ProbeResult
from fuzzbuster.utility.logger import LoggerManager
from fuzzbuster.wordlist import Wordlist

"""
Configuration class
"""


class Configuration:
    """
    Turns raw option values into the objects the fuzzer runs with

    Args:
    - url (str): URL template to target
    - wordlist (str): Path to the wordlist file
    - extensions (str): Comma separated extensions to append to each word
    """

    def __init__(
        self,
        url: str,
        wordlist: Optional[str] = None,
        extensions: Optional[str] = None,
    ) -> None:
        self.logger = LoggerManager(__name__).get_logger()
        self.url = url
        self.wordlist = wordlist
        self.extensions = extensions

    def validate_url(self) -> Optional[str]:
        """
        Ensure the provided URL includes a scheme (http/https) and correct format.
        Adds 'http://' if no scheme provided in the argument.

        Returns:
        - A valid url for further processing, None if it can't be used
        """

        if not self.url:
            return None

        if "://" not in self.url:
            url = "http://" + self.url
        else:
            url = self.url

        try:
            parsed = urlparse(url)
        except ValueError as e:
            self.logger.error(f"URL parsing error for {self.url}: {e}")
            return None

        if parsed.scheme not in ["http", "https"]:
            self.logger.error("Invalid scheme - only http/https allowed")
            return None

        if not parsed.netloc:
            self.logger.error(f"Invalid URL format: {self.url}")
            return None

        return url

    def parse_extensions(self) -> List[str]:
        """
        Split the extensions option, e.g. "json,xml"

        Returns:
        - List[str]: Extensions without dots, [""] for the bare words only
        """

        if not self.extensions:
            return [""]
        return [ext.strip().lstrip(".") for ext in self.extensions.split(",")]

    def load_wordlist(self) -> Wordlist:
        if not self.wordlist:
            raise ConfigurationError("No wordlist given")
        return Wordlist(self.wordlist, self.parse_extensions())

    @staticmethod
    def parse_header(header_str: str) -> Tuple[str, str]:
        """
        Splits a 'Header-Name: value' option into its name and value

        Args:
        - header_str (str): Raw header option

        Returns:
        - Tuple[str, str]: Stripped name and value

        Raises:
        - ConfigurationError: If there is no colon or no name
        """

        if ":" not in header_str:
            raise ConfigurationError(
                f"Invalid header format: '{header_str}', expected 'Header-Name: value'"
            )
        key, value = header_str.split(":", 1)
        key = key.strip()
        if not key or any(c.isspace() for c in key):
            raise ConfigurationError(f"Invalid header name in '{header_str}'")
        return key, value.strip()

    def parse_headers(self, headers: Iterable[str]) -> List[Tuple[str, str]]:
        return [self.parse_header(h) for h in headers]

    @staticmethod
    def build_filters(
        filter_status_codes: Optional[str] = None,
        filter_content_length: Optional[str] = None,
        filter_body: Optional[str] = None,
        baseline: FilterSet = DEFAULT_FILTERS,
    ) -> FilterSet:
        """
        Overrides the baseline filter set with the options that were given

        Returns:
        - FilterSet: The filter set for the run
        """

        return baseline.with_overrides(
            status_codes=parse_status_codes(filter_status_codes)
            if filter_status_codes is not None
            else None,
            content_length=FilterContentLength.parse(filter_content_length)
            if filter_content_length is not None
            else None,
            body=FilterBody.parse(filter_body) if filter_body is not None else None,
        )

    def write_results_to_file(
        self, results: List[ProbeResult], output_file_path: str
    ) -> None:
        """
        Writes the request URL of each reported result to an output file

        Args:
        - results: (List[ProbeResult]): Reported results
        - output_file_path (str): Path to the output file where results will be written
        """

        if not results:
            self.logger.warning("No result to write")
            return

        try:
            with open(output_file_path, "w", encoding="utf-8") as f:
                for result in results:
                    f.write(result.request_url + "\n")
            self.logger.info(f"Results written to {output_file_path}")
        except IOError as e:
            self.logger.error(
                f"I/O Error occurred when writing to {output_file_path}: {e}"
            )

    @staticmethod
    def format_time_remaining(seconds: float) -> str:
        """
        Format a duration in a user-friendly way

        Args:
        - seconds: duration in seconds
        """

        if seconds <= 0:
            return "0s"
        elif seconds < 60:
            return f"{seconds:.0f}s"
        elif seconds < 3600:
            minutes = int(seconds // 60)
            remaining_seconds = int(seconds % 60)
            if remaining_seconds > 0:
                return f"{minutes}m {remaining_seconds}s"
            return f"{minutes}m"
        else:
            hours = int(seconds // 3600)
            minutes = int((seconds % 3600) // 60)
            if minutes > 0:
                return f"{hours}h {minutes}m"
            return f"{hours}h"
