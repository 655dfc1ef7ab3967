import argparse

from typing import List, Optional

from fuzzbuster import __version__
from fuzzbuster.config.constants import Constants

BANNER = r"""
  __                _               _
 / _|_   _ ________| |__  _   _ ___| |_ ___ _ __
| |_| | | |_  /_  /| '_ \| | | / __| __/ _ \ '__|
|  _| |_| |/ / / / | |_) | |_| \__ \ ||  __/ |
|_|  \__,_/___/___||_.__/ \__,_|___/\__\___|_|

Examples:
  fuzzbuster -u http://target/FUZZ -w words.txt
  fuzzbuster -u http://target -H "Host: FUZZ.target" -w vhosts.txt --filter-content-length 0-120
        """


class ArgumentParser:
    """
    Handles argument parsing and script execution
    """

    def __init__(self):
        self.parser = self.create_parser()

    def create_parser(self) -> argparse.ArgumentParser:
        """
        Configures the argument parser with expected arguments.

        Returns:
        - argparse.ArgumentParser: The configured argument parser
        """

        parser = argparse.ArgumentParser(
            prog="fuzzbuster",
            description=f"Content and virtual host discovery fuzzer. "
            f"The {Constants.FUZZ} keyword in the URL, headers or body is replaced by each word.",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=BANNER,
        )

        parser.add_argument(
            "-u",
            "--url",
            type=str,
            required=True,
            help="The target URL",
        )

        parser.add_argument(
            "-w",
            "--wordlist",
            type=str,
            required=True,
            help="Path to the wordlist",
        )

        parser.add_argument(
            "-x",
            "--extensions",
            type=str,
            default="",
            help="File extensions to search for, e.g. json,xml",
        )

        parser.add_argument(
            "-m",
            "--method",
            type=str,
            default=Constants.DEFAULT_METHOD,
            help=f"HTTP method to use (default: {Constants.DEFAULT_METHOD})",
        )

        parser.add_argument(
            "-H",
            "--header",
            action="append",
            default=[],
            help="Custom header, format 'Header-Name: value' (repeatable)",
        )

        parser.add_argument(
            "-b",
            "--body",
            type=str,
            default="",
            help="Request body",
        )

        parser.add_argument(
            "-d",
            "--delay",
            type=float,
            default=0.0,
            help="Delay between requests of a worker, in seconds",
        )

        parser.add_argument(
            "-t",
            "--threads",
            type=int,
            default=Constants.DEFAULT_THREADS,
            help=f"Number of threads (default: {Constants.DEFAULT_THREADS})",
        )

        parser.add_argument(
            "--filter-status-codes",
            type=str,
            default=Constants.DEFAULT_FILTER_STATUS_CODES,
            help="Status codes that will be ignored, e.g. 404,500",
        )

        parser.add_argument(
            "--filter-content-length",
            type=str,
            default=None,
            help="Content lengths that will be ignored, e.g. 20,300, or a range, e.g. 20-300",
        )

        parser.add_argument(
            "--filter-body",
            type=str,
            default=None,
            help="Ignore if text appears in the response body",
        )

        parser.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="Verbose output including status code, content length and time",
        )

        parser.add_argument(
            "-o",
            "--output_file",
            type=str,
            help="File to write reported URLs to (optional)",
        )

        parser.add_argument(
            "--time",
            type=float,
            default=None,
            help="Max scan time in minutes",
        )

        parser.add_argument(
            "--timeout",
            type=float,
            default=Constants.TIMEOUT,
            help=f"Request timeout in seconds (default: {Constants.TIMEOUT})",
        )

        parser.add_argument(
            "--verify-ssl",
            action="store_true",
            help="Verify TLS certificates (off by default)",
        )

        parser.add_argument(
            "--proxy",
            type=str,
            default=None,
            help="Proxy URL for http and https requests, e.g. http://127.0.0.1:8080",
        )

        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {__version__}",
        )

        return parser

    def parse_args(self, argv: Optional[List[str]] = None) -> argparse.Namespace:
        """
        Parse and return command-line arguments

        Returns a namespace object
        """

        return self.parser.parse_args(argv)
