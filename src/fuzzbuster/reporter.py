"""
Result sinks

The engine hands every ProbeResult to a sink through report(); the sink
decides what gets shown and how. Calls are already serialised by the
engine's aggregator.
"""
import sys
import threading

from typing import List, Optional

from termcolor import colored
from tqdm import tqdm

from fuzzbuster.models import ProbeResult, ProbeStatus


class ResultSink:
    def report(self, result: ProbeResult) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class CollectingSink(ResultSink):
    """
    Keeps every result in memory, in arrival order
    """

    def __init__(self) -> None:
        self.results: List[ProbeResult] = []
        self._lock = threading.Lock()

    def report(self, result: ProbeResult) -> None:
        with self._lock:
            self.results.append(result)

    def by_status(self, status: ProbeStatus) -> List[ProbeResult]:
        with self._lock:
            return [r for r in self.results if r.status is status]

    @property
    def words(self) -> List[str]:
        with self._lock:
            return [r.word for r in self.results]


def color_status_code(status_code: int, line: str) -> str:
    """
    Color the line with the status code to indicate success, failure or so

    Args:
    - status_code (int): the status code of the given line.
    - line: the line to print

    Returns:
    - str: The line in colored/plain format
    """

    if 200 <= status_code < 300:
        return colored(line, "green")
    elif 300 <= status_code < 400:
        return colored(line, "cyan")
    elif 400 <= status_code < 500:
        if status_code == 404:
            return colored(line, "magenta")
        elif status_code == 429:
            return colored(line, "red", attrs=["bold"])
        return colored(line, "red")
    elif 500 <= status_code < 600:
        return colored(line, "red", attrs=["bold"])
    return line


def format_result(result: ProbeResult, verbose: bool) -> str:
    """
    Render one result: the request URL, or status/length/time columns in
    verbose mode
    """

    if not verbose:
        return result.request_url

    if result.failed:
        return f"{result.word:<30} ({'ERROR':>10}) {result.error}"

    line = (
        f"{result.word:<30} ({result.status_code:>10}) "
        f"[Size: {result.content_length}] [Time: {result.elapsed * 1000:.0f}ms]"
    )
    if result.status is ProbeStatus.SUPPRESSED:
        return colored(line, attrs=["dark"])
    return color_status_code(result.status_code, line)


class ConsoleReporter(ResultSink):
    """
    Streams results to the terminal above a progress bar

    Only reported results are printed, unless verbose is set in which case
    suppressed and failed results are shown too.

    Args:
    - verbose (bool): Show columns and non reported results
    - total (int): Number of candidates, for the progress bar
    - progress (Optional[bool]): False disables the bar, None disables it on a non-TTY
    """

    def __init__(
        self,
        verbose: bool = False,
        total: Optional[int] = None,
        progress: Optional[bool] = None,
        stream=None,
    ) -> None:
        self.verbose = verbose
        self.stream = stream or sys.stdout
        self.progress_bar = tqdm(
            total=total,
            unit="req",
            disable=None if progress is None else not progress,
            leave=False,
            file=sys.stderr,
            bar_format="[{elapsed}] {bar:40} {n_fmt}/{total_fmt} [{rate_fmt}]",
        )

    def report(self, result: ProbeResult) -> None:
        self.progress_bar.update(1)
        if result.status is not ProbeStatus.REPORTED and not self.verbose:
            return
        tqdm.write(format_result(result, self.verbose), file=self.stream)

    def close(self) -> None:
        self.progress_bar.close()
