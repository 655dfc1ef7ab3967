import sys

from typing import List, Optional

import urllib3

from fuzzbuster.config.runtime_config import FuzzerRuntimeConfig
from fuzzbuster.config.static_config import FuzzerStaticConfig
from fuzzbuster.errors import ConfigurationError
from fuzzbuster.fuzzer import Fuzzer
from fuzzbuster.models import EngineState
from fuzzbuster.reporter import ConsoleReporter
from fuzzbuster.transport import HttpTransport
from fuzzbuster.utility.argumentparser import ArgumentParser
from fuzzbuster.utility.configuration import Configuration
from fuzzbuster.utility.logger import LoggerManager

logger = LoggerManager().get_logger()

urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


class App:
    def __init__(self, argv: Optional[List[str]] = None):
        """
        Initialize the application, including argument parsing and runner

        Raises:
        - ConfigurationError: Before any request is sent, if the options can't be used
        """

        parser = ArgumentParser()
        args = parser.parse_args(argv)

        configuration = Configuration(
            url=args.url,
            wordlist=args.wordlist,
            extensions=args.extensions,
        )
        config = FuzzerStaticConfig.build_fuzzer_config(
            configuration, method=args.method, header=args.header, body=args.body
        )
        runtime_config = FuzzerRuntimeConfig(
            num_threads=args.threads,
            delay=args.delay,
            filters=configuration.build_filters(
                filter_status_codes=args.filter_status_codes,
                filter_content_length=args.filter_content_length,
                filter_body=args.filter_body,
            ),
            verbose=args.verbose,
            timeout=args.timeout,
            verify_ssl=args.verify_ssl,
            proxy=args.proxy,
            output_file=args.output_file,
            time=args.time,
        ).validate()

        self.wordlist = configuration.load_wordlist()
        proxy = runtime_config.proxy
        self.transport = HttpTransport(
            timeout=runtime_config.timeout,
            verify_ssl=runtime_config.verify_ssl,
            proxy={"http": proxy, "https": proxy} if proxy else None,
        )
        reporter = ConsoleReporter(
            verbose=runtime_config.verbose, total=len(self.wordlist)
        )
        self.fuzzer = Fuzzer(
            config=config,
            runtime_config=runtime_config,
            transport=self.transport,
            sink=reporter,
        )

    def run(self) -> EngineState:
        """
        Runs the main logic for the script execution
        """

        try:
            return self.fuzzer.run(self.wordlist).state
        finally:
            self.transport.close()


def main(argv: Optional[List[str]] = None):
    """
    The entry point for script execution
    """

    try:
        app = App(argv)
        state = app.run()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        sys.exit(1)

    if state is EngineState.CANCELLED and not app.fuzzer.time_hit_logged:
        sys.exit(130)


if __name__ == "__main__":
    main()
