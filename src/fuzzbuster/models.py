"""
Data models shared by the engine, the transport and the reporters
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ProbeStatus(Enum):
    REPORTED = "reported"
    SUPPRESSED = "suppressed"
    FAILED = "failed"


class EngineState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ResolvedRequest:
    """A request with every placeholder substituted for one word."""

    method: str
    url: str
    headers: Tuple[Tuple[str, str], ...] = ()
    body: str = ""

    def header_dict(self) -> dict:
        return dict(self.headers)


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    content_length: int
    body: Optional[str]
    elapsed: float


@dataclass
class ProbeResult:
    """
    Outcome of probing a single word

    status_code is None when the transport failed, in which case error
    holds the cause. body is only kept when a body filter needs it.
    """

    word: str
    request_url: str
    status_code: Optional[int] = None
    content_length: int = 0
    elapsed: float = 0.0
    body: Optional[str] = None
    error: Optional[str] = None
    reported: bool = False

    @property
    def failed(self) -> bool:
        return self.status_code is None

    @property
    def status(self) -> ProbeStatus:
        if self.failed:
            return ProbeStatus.FAILED
        if self.reported:
            return ProbeStatus.REPORTED
        return ProbeStatus.SUPPRESSED


@dataclass
class RunSummary:
    state: EngineState
    processed: int = 0
    reported: int = 0
    suppressed: int = 0
    failed: int = 0
    elapsed: float = 0.0
