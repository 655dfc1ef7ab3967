"""Shared fixtures for the fuzzbuster tests."""
import threading
import time

import pytest

from fuzzbuster.config.runtime_config import FuzzerRuntimeConfig
from fuzzbuster.config.static_config import FuzzerStaticConfig
from fuzzbuster.errors import TransportError
from fuzzbuster.models import TransportResponse
from fuzzbuster.resolver import RequestTemplate


class FakeTransport:
    """Answers from a table of responses keyed by URL, records every call."""

    def __init__(self, responses=None, default=(404, "not found"), latency=0.0, fail=()):
        self.responses = responses or {}
        self.default = default
        self.latency = latency
        self.fail = set(fail)
        self.calls = []
        self.wanted_body = []
        self.lock = threading.Lock()

    def send(self, method, url, headers, body="", want_body=True):
        with self.lock:
            self.calls.append((method, url, dict(headers), body))
            self.wanted_body.append(want_body)
        if self.latency:
            time.sleep(self.latency)
        if url in self.fail:
            raise TransportError("Connection failed: refused", url)
        status, text = self.responses.get(url, self.default)
        return TransportResponse(
            status_code=status,
            content_length=len(text.encode("utf-8")),
            body=text if want_body else None,
            elapsed=self.latency,
        )

    def close(self):
        self.closed = True

    @property
    def urls(self):
        with self.lock:
            return [call[1] for call in self.calls]


def make_config(url="http://target/FUZZ", method="GET", headers=(), body=""):
    template = RequestTemplate(url=url, method=method, headers=headers, body=body)
    return FuzzerStaticConfig(
        url=url,
        method=template.method,
        headers=template.headers,
        body=template.body,
        template=template,
    )


@pytest.fixture
def static_config():
    return make_config()


@pytest.fixture
def runtime_config():
    return FuzzerRuntimeConfig(num_threads=4)


@pytest.fixture
def wordlist_file(tmp_path):
    path = tmp_path / "words.txt"
    path.write_text("admin\n\n  login  \nbackup\n", encoding="utf-8")
    return path
