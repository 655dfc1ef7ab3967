import concurrent.futures
import threading
import time

from typing import Iterable, List, Optional

from termcolor import colored

from fuzzbuster.config.constants import Constants
from fuzzbuster.config.runtime_config import FuzzerRuntimeConfig
from fuzzbuster.config.static_config import FuzzerStaticConfig
from fuzzbuster.errors import TransportError
from fuzzbuster.filters import FilterSet
from fuzzbuster.models import EngineState, ProbeResult, ProbeStatus, RunSummary
from fuzzbuster.reporter import ResultSink
from fuzzbuster.utility.configuration import Configuration
from fuzzbuster.utility.logger import LoggerManager
from fuzzbuster.wordlist import CandidateSource


class ResultAggregator:
    """
    Serialises results coming from every worker into the sink and keeps
    the run counters
    """

    def __init__(self, sink: ResultSink) -> None:
        self.sink = sink
        self._lock = threading.Lock()
        self.reported: List[ProbeResult] = []
        self.counts = {status: 0 for status in ProbeStatus}

    @property
    def processed(self) -> int:
        return sum(self.counts.values())

    def submit(self, result: ProbeResult) -> None:
        with self._lock:
            status = result.status
            self.counts[status] += 1
            if status is ProbeStatus.REPORTED:
                self.reported.append(result)
            self.sink.report(result)


class Fuzzer:
    """
    Runs the fuzzer engine from the static and runtime config initialization

    A fixed pool of workers drains a shared CandidateSource. Each worker
    paces itself, resolves the request for its word, sends it with no lock
    held and passes the filtered result to the aggregator.

    Args:
    - config (FuzzerStaticConfig): Request templates
    - runtime_config (FuzzerRuntimeConfig): Threads, delay, filters
    - transport: Object with send(method, url, headers, body, want_body)
    - sink (ResultSink): Receives every result as soon as it is known
    """

    def __init__(
        self,
        config: FuzzerStaticConfig,
        runtime_config: FuzzerRuntimeConfig,
        transport,
        sink: ResultSink,
    ) -> None:
        self.logger = LoggerManager(__name__).get_logger()
        self.config = config
        self.runtime_config = runtime_config.validate()
        self.transport = transport
        self.filters: FilterSet = runtime_config.filters
        self.aggregator = ResultAggregator(sink)

        self.state = EngineState.IDLE
        self.state_lock = threading.Lock()
        self.stop_event = threading.Event()
        self.log_lock = threading.Lock()
        self.time_hit_logged = False

        self.global_time_limit_minutes = runtime_config.time
        self.scan_start_time: Optional[float] = None
        self._progress_milestone = 0

    # === CANCELLATION ===

    def cancel(self) -> None:
        """
        Stop handing out candidates. In-flight requests still complete
        and are reported.
        """

        self.stop_event.set()

    @property
    def cancelled(self) -> bool:
        return self.stop_event.is_set()

    def _is_timeout_global(self) -> bool:
        """
        Check global timeout

        Returns:
        - bool: True if cancelled or the global time limit is exceeded
        """

        if self.stop_event.is_set():
            return True

        if (
            self.global_time_limit_minutes is not None
            and self.scan_start_time is not None
        ):
            elapsed_minutes = (time.monotonic() - self.scan_start_time) / 60
            if elapsed_minutes > self.global_time_limit_minutes:
                self._log_timeout_once(
                    f"Global time limit exceeded: {elapsed_minutes:.2f}min > {self.global_time_limit_minutes}min"
                )
                return True
        return False

    def _log_timeout_once(self, message: str) -> None:
        with self.log_lock:
            if not self.time_hit_logged:
                self.logger.info(message)
                self.time_hit_logged = True
                self.stop_event.set()

    # === WORKERS ===

    def _coordinate_delay(self, last_request_time: Optional[float]) -> None:
        """
        Wait out the rest of the delay since this worker's previous request.
        Returns early on cancellation.

        Args:
        - last_request_time (Optional[float]): monotonic time of the previous send
        """

        delay = self.runtime_config.delay
        if not delay or last_request_time is None:
            return

        remaining = delay - (time.monotonic() - last_request_time)
        if remaining > 0:
            self.stop_event.wait(remaining)

    def _worker(self, source: CandidateSource) -> int:
        """
        Pull candidates until the source is exhausted or the run is cancelled

        Args:
        - source (CandidateSource): Shared candidate source

        Returns:
        - int: Number of candidates this worker probed
        """

        processed = 0
        last_request_time = None

        while not self._is_timeout_global():
            self._coordinate_delay(last_request_time)
            if self._is_timeout_global():
                break

            word = source.next_candidate()
            if word is None:
                break

            last_request_time = time.monotonic()
            self.aggregator.submit(self.probe(word))
            processed += 1

        return processed

    def probe(self, word: str) -> ProbeResult:
        """
        Resolve, send and filter the request for one word

        Args:
        - word (str): Candidate word

        Returns:
        - ProbeResult: Reported, suppressed or failed result
        """

        request = self.config.template.build(word)

        try:
            response = self.transport.send(
                request.method,
                request.url,
                request.header_dict(),
                request.body,
                want_body=self.filters.needs_body,
            )
        except TransportError as e:
            self.logger.warning(f"{request.method} {request.url} failed: {e}")
            return ProbeResult(word=word, request_url=request.url, error=str(e))

        result = ProbeResult(
            word=word,
            request_url=request.url,
            status_code=response.status_code,
            content_length=response.content_length,
            elapsed=response.elapsed,
            body=response.body,
        )
        return self.filters.apply(result)

    # === MAIN EXECUTION ===

    def _set_state(self, state: EngineState) -> None:
        with self.state_lock:
            self.state = state

    def _wait_for_workers(self, futures: List[concurrent.futures.Future]) -> None:
        """
        Wait for every worker. A KeyboardInterrupt cancels the run and keeps
        waiting for in-flight requests.
        """

        pending = set(futures)
        while pending:
            try:
                _, pending = concurrent.futures.wait(
                    pending, timeout=Constants.POLL_INTERVAL
                )
                self._log_progress()
            except KeyboardInterrupt:
                self.logger.warning("Interrupted, waiting for in-flight requests")
                self.cancel()

    def _log_progress(self) -> None:
        milestone = self.aggregator.processed // Constants.PROGRESS_LOG_INTERVAL
        if milestone > self._progress_milestone:
            self._progress_milestone = milestone
            elapsed = time.monotonic() - self.scan_start_time
            self.logger.info(
                f"Request processing progress: {self.aggregator.processed} requests in "
                f"{Configuration.format_time_remaining(elapsed)}"
            )

    def run(self, candidates: Iterable[str]) -> RunSummary:
        """
        Probe every candidate with num_threads workers

        Args:
        - candidates (Iterable[str]): Line source or CandidateSource

        Returns:
        - RunSummary: Final state and counters

        Raises:
        - RuntimeError: If the fuzzer already ran
        """

        with self.state_lock:
            if self.state is not EngineState.IDLE:
                raise RuntimeError(f"Fuzzer can only run once, state is {self.state.value}")
            self.state = EngineState.RUNNING

        source = (
            candidates
            if isinstance(candidates, CandidateSource)
            else CandidateSource(candidates)
        )

        self.scan_start_time = time.monotonic()
        self._display_configuration()

        max_workers = self.runtime_config.num_threads
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="fuzzbuster-worker"
        )
        futures = []
        try:
            futures = [executor.submit(self._worker, source) for _ in range(max_workers)]
            self._wait_for_workers(futures)
        finally:
            executor.shutdown(wait=True)
            self.aggregator.sink.close()

        # Re-raise anything unexpected a worker hit
        for future in futures:
            future.result()

        self._set_state(
            EngineState.COMPLETED if source.exhausted else EngineState.CANCELLED
        )
        return self._finalize_results()

    def _display_configuration(self) -> None:
        self.logger.info("=" * 50)
        self.logger.info("FUZZER CONFIGURATION")
        self.logger.info("=" * 50)
        self.logger.info(f"Target: {self.config.method} {self.config.url}")
        self.logger.info(f"Fuzzing: {', '.join(self.config.template.fuzzed_locations())}")
        if self.config.headers:
            self.logger.info(f"Headers: {len(self.config.headers)} header(s)")
        self.logger.info(f"Threading: {self.runtime_config.num_threads} worker(s)")
        self.logger.info(f"Request delay: {self.runtime_config.delay}s")
        self.logger.info(f"Request timeout: {self.runtime_config.timeout}s")
        self.logger.info(f"Filters: {self.filters.describe()}")
        if self.global_time_limit_minutes:
            self.logger.info(f"Global time limit: {self.global_time_limit_minutes} minutes")
        if self.runtime_config.output_file:
            self.logger.info(f"Output file: {self.runtime_config.output_file}")
        self.logger.info("=" * 50)

    def _finalize_results(self) -> RunSummary:
        """
        Write the results file and log the summary

        Returns:
        - RunSummary: Final state and counters
        """

        counts = self.aggregator.counts
        summary = RunSummary(
            state=self.state,
            processed=self.aggregator.processed,
            reported=counts[ProbeStatus.REPORTED],
            suppressed=counts[ProbeStatus.SUPPRESSED],
            failed=counts[ProbeStatus.FAILED],
            elapsed=time.monotonic() - self.scan_start_time,
        )

        if self.runtime_config.output_file:
            Configuration(self.config.url).write_results_to_file(
                self.aggregator.reported, self.runtime_config.output_file
            )

        message = (
            f"Run {summary.state.value} in "
            f"{Configuration.format_time_remaining(summary.elapsed)}: "
            f"{summary.processed} processed, {summary.reported} reported, "
            f"{summary.suppressed} suppressed, {summary.failed} failed"
        )
        if summary.state is EngineState.COMPLETED:
            self.logger.info(colored(message, "green"))
        else:
            self.logger.warning(message)

        return summary
