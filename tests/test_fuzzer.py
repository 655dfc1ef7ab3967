"""
Tests for the fuzzing engine: dispatch, filtering, pacing and cancellation.
"""
import _thread
import threading
import time

import pytest

from conftest import FakeTransport, make_config
from fuzzbuster.config.runtime_config import FuzzerRuntimeConfig
from fuzzbuster.errors import ConfigurationError
from fuzzbuster.filters import DEFAULT_FILTERS, FilterBody, FilterContentLength
from fuzzbuster.fuzzer import Fuzzer
from fuzzbuster.models import EngineState, ProbeStatus, TransportResponse
from fuzzbuster.reporter import CollectingSink
from fuzzbuster.wordlist import CandidateSource


def words(count):
    return [f"word{i}" for i in range(count)]


def build(transport, config=None, **runtime):
    sink = CollectingSink()
    runtime.setdefault("num_threads", 4)
    fuzzer = Fuzzer(
        config=config or make_config(),
        runtime_config=FuzzerRuntimeConfig(**runtime),
        transport=transport,
        sink=sink,
    )
    return fuzzer, sink


class TestDispatch:
    @pytest.mark.parametrize("threads", [1, 2, 7, 20])
    def test_every_candidate_probed_exactly_once(self, threads):
        transport = FakeTransport()
        fuzzer, sink = build(transport, num_threads=threads)

        summary = fuzzer.run(words(20))

        assert summary.state is EngineState.COMPLETED
        assert summary.processed == 20
        assert sorted(sink.words) == sorted(words(20))
        assert sorted(transport.urls) == sorted(f"http://target/{w}" for w in words(20))

    def test_fifty_threads_thousand_words(self):
        transport = FakeTransport(
            responses={"http://target/word7": (200, "ok")}, latency=0.001
        )
        fuzzer, sink = build(transport, num_threads=50)

        summary = fuzzer.run(words(1000))

        assert len(transport.calls) == 1000
        assert summary.processed == 1000
        assert summary.reported + summary.suppressed + summary.failed == 1000
        assert summary.reported == 1
        assert len(sink.results) == 1000
        assert len(set(sink.words)) == 1000

    def test_more_threads_than_candidates(self):
        transport = FakeTransport()
        fuzzer, _ = build(transport, num_threads=16)
        assert fuzzer.run(["a", "b"]).processed == 2

    def test_empty_wordlist_completes(self):
        fuzzer, sink = build(FakeTransport())
        summary = fuzzer.run(["", "   "])
        assert summary.state is EngineState.COMPLETED
        assert summary.processed == 0
        assert sink.results == []

    def test_accepts_candidate_source(self, wordlist_file):
        transport = FakeTransport()
        fuzzer, sink = build(transport)
        with open(wordlist_file, encoding="utf-8") as lines:
            fuzzer.run(CandidateSource(lines))
        assert sorted(sink.words) == ["admin", "backup", "login"]

    def test_run_only_once(self):
        fuzzer, _ = build(FakeTransport())
        fuzzer.run(["a"])
        with pytest.raises(RuntimeError):
            fuzzer.run(["b"])

    def test_results_delivered_from_worker_threads(self):
        seen = []

        class ThreadRecordingSink(CollectingSink):
            def report(self, result):
                seen.append(threading.current_thread().name)
                super().report(result)

        fuzzer = Fuzzer(
            config=make_config(),
            runtime_config=FuzzerRuntimeConfig(num_threads=2),
            transport=FakeTransport(),
            sink=ThreadRecordingSink(),
        )
        fuzzer.run(words(5))
        assert len(seen) == 5
        assert all(name.startswith("fuzzbuster-worker") for name in seen)

    def test_resolves_headers_and_body(self):
        transport = FakeTransport()
        config = make_config(
            url="http://target/api",
            method="post",
            headers=[("Host", "FUZZ.target"), ("Accept", "*/*")],
            body="name=FUZZ",
        )
        fuzzer, _ = build(transport, config=config, num_threads=1)
        fuzzer.run(["dev"])
        assert transport.calls == [
            ("POST", "http://target/api", {"Host": "dev.target", "Accept": "*/*"}, "name=dev")
        ]


class TestFiltering:
    def test_default_filter_suppresses_404(self):
        transport = FakeTransport(responses={"http://target/admin": (200, "welcome")})
        fuzzer, sink = build(transport)

        summary = fuzzer.run(["admin", "nothing"])

        reported = sink.by_status(ProbeStatus.REPORTED)
        assert [r.word for r in reported] == ["admin"]
        assert reported[0].status_code == 200
        assert reported[0].content_length == 7
        assert summary.suppressed == 1

    def test_length_range(self):
        transport = FakeTransport(
            responses={
                "http://target/a": (200, "x" * 250),
                "http://target/b": (200, "x" * 301),
            }
        )
        filters = DEFAULT_FILTERS.with_overrides(
            content_length=FilterContentLength.parse("20-300")
        )
        fuzzer, sink = build(transport, filters=filters)
        fuzzer.run(["a", "b"])
        assert [r.word for r in sink.by_status(ProbeStatus.REPORTED)] == ["b"]
        assert [r.word for r in sink.by_status(ProbeStatus.SUPPRESSED)] == ["a"]

    def test_body_substring(self):
        transport = FakeTransport(
            responses={
                "http://target/a": (200, "<h1>Not Found</h1>"),
                "http://target/b": (200, "<h1>Hello</h1>"),
            }
        )
        filters = DEFAULT_FILTERS.with_overrides(body=FilterBody("Not Found"))
        fuzzer, sink = build(transport, filters=filters)
        fuzzer.run(["a", "b"])
        reported = sink.by_status(ProbeStatus.REPORTED)
        assert [r.word for r in reported] == ["b"]
        assert reported[0].body == "<h1>Hello</h1>"
        assert transport.wanted_body == [True, True]

    def test_body_not_kept_without_body_filter(self):
        transport = FakeTransport(responses={"http://target/a": (200, "content")})
        fuzzer, sink = build(transport)
        fuzzer.run(["a"])
        assert sink.results[0].body is None
        assert sink.results[0].content_length == 7
        assert transport.wanted_body == [False]

    def test_transport_error_does_not_stop_run(self):
        transport = FakeTransport(
            responses={"http://target/word3": (200, "ok")},
            fail={"http://target/word1", "http://target/word2"},
        )
        fuzzer, sink = build(transport, num_threads=2)

        summary = fuzzer.run(words(6))

        assert summary.state is EngineState.COMPLETED
        assert summary.failed == 2
        assert summary.reported == 1
        assert summary.suppressed == 3
        failed = sink.by_status(ProbeStatus.FAILED)
        assert sorted(r.word for r in failed) == ["word1", "word2"]
        assert all(r.status_code is None and "refused" in r.error for r in failed)

    def test_unexpected_worker_error_propagates(self):
        class BrokenTransport:
            def send(self, method, url, headers, body="", want_body=True):
                raise ValueError("boom")

        fuzzer, _ = build(BrokenTransport(), num_threads=1)
        with pytest.raises(ValueError):
            fuzzer.run(["a"])


class TestPacingAndCancellation:
    def test_delay_between_requests_of_a_worker(self):
        fuzzer, _ = build(FakeTransport(), num_threads=1, delay=0.2)

        start = time.monotonic()
        summary = fuzzer.run(words(5))

        assert time.monotonic() - start >= 0.8
        assert summary.processed == 5

    def test_cancel_stops_dispatch(self):
        state = {}

        class CancellingTransport(FakeTransport):
            def send(self, method, url, headers, body="", want_body=True):
                with self.lock:
                    self.calls.append((method, url, dict(headers), body))
                    count = len(self.calls)
                if count == 10:
                    state["fuzzer"].cancel()
                time.sleep(self.latency)
                return TransportResponse(404, 0, "", self.latency)

        transport = CancellingTransport(latency=0.005)
        fuzzer, sink = build(transport, num_threads=4)
        state["fuzzer"] = fuzzer

        summary = fuzzer.run(words(1000))

        assert summary.state is EngineState.CANCELLED
        assert fuzzer.cancelled
        # only requests already in flight or already dispatched may follow
        assert 10 <= len(transport.calls) <= 16
        # everything that was sent is still reported
        assert summary.processed == len(transport.calls) == len(sink.results)

    def test_cancel_interrupts_delay(self):
        fuzzer, _ = build(FakeTransport(), num_threads=1, delay=30)
        timer = threading.Timer(0.2, fuzzer.cancel)
        timer.start()

        start = time.monotonic()
        summary = fuzzer.run(words(5))

        assert time.monotonic() - start < 10
        assert summary.state is EngineState.CANCELLED
        assert summary.processed == 1

    def test_keyboard_interrupt_cancels_run(self):
        transport = FakeTransport(latency=0.01)
        fuzzer, sink = build(transport, num_threads=2)
        timer = threading.Timer(0.2, _thread.interrupt_main)
        timer.start()

        summary = fuzzer.run(words(5000))

        assert summary.state is EngineState.CANCELLED
        assert fuzzer.cancelled
        assert not fuzzer.time_hit_logged
        assert 0 < summary.processed < 5000
        # in-flight requests finish and are still reported
        assert summary.processed == len(transport.calls) == len(sink.results)

    def test_global_time_limit(self):
        transport = FakeTransport(latency=0.01)
        fuzzer, _ = build(transport, num_threads=1, time=0.002)

        summary = fuzzer.run(words(10000))

        assert summary.state is EngineState.CANCELLED
        assert fuzzer.time_hit_logged
        assert summary.processed < 10000


class TestConfiguration:
    @pytest.mark.parametrize(
        "runtime",
        [{"num_threads": 0}, {"num_threads": -2}, {"delay": -1}, {"timeout": 0}, {"time": 0}],
    )
    def test_invalid_runtime_config(self, runtime):
        with pytest.raises(ConfigurationError):
            build(FakeTransport(), **runtime)

    def test_results_file(self, tmp_path):
        output = tmp_path / "found.txt"
        transport = FakeTransport(
            responses={"http://target/a": (200, "ok"), "http://target/c": (301, "")}
        )
        fuzzer, _ = build(transport, num_threads=1, output_file=str(output))
        fuzzer.run(["a", "b", "c"])
        assert output.read_text(encoding="utf-8").splitlines() == [
            "http://target/a",
            "http://target/c",
        ]
