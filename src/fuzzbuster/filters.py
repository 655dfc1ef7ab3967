"""
Response filters

A response is suppressed when its status code is excluded, its content
length falls on an excluded value or inside an excluded range, or its body
contains the excluded text. Every check is independent.
"""
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, Optional, Tuple

from fuzzbuster.config.constants import Constants
from fuzzbuster.errors import ConfigurationError
from fuzzbuster.models import ProbeResult


def _parse_length(value: str, raw: str) -> int:
    value = value.strip()
    if not value.isdecimal():
        raise ConfigurationError(f"Invalid content length '{value}' in '{raw}'")
    return int(value)


def parse_status_codes(raw: str) -> FrozenSet[int]:
    """
    Parse a comma separated list of status codes, e.g. "404,500"

    Args:
    - raw (str): Raw option value

    Returns:
    - FrozenSet[int]: The status codes
    """

    codes = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if not part.isdecimal() or not 100 <= int(part) <= 599:
            raise ConfigurationError(f"Invalid status code '{part}'")
        codes.add(int(part))
    return frozenset(codes)


@dataclass(frozen=True)
class FilterContentLength:
    """
    Excluded content lengths: single values and closed ranges
    """

    values: FrozenSet[int] = frozenset()
    ranges: Tuple[Tuple[int, int], ...] = ()

    def __post_init__(self):
        for low, high in self.ranges:
            if low > high:
                raise ConfigurationError(f"Invalid content length range {low}-{high}")

    @classmethod
    def parse(cls, raw: Optional[str]) -> "FilterContentLength":
        """
        Parse "20,300", "20-300" or a mix such as "0,20-300"

        Args:
        - raw (str): Raw option value, empty or None for no filter

        Returns:
        - FilterContentLength: The parsed filter
        """

        if not raw or not raw.strip():
            return cls()

        values = set()
        ranges = []
        for part in raw.split(","):
            part = part.strip()
            if not part:
                continue
            if "-" in part:
                bounds = part.split("-")
                if len(bounds) != 2:
                    raise ConfigurationError(
                        f"Expected 2 values in content length range '{part}'"
                    )
                ranges.append((_parse_length(bounds[0], raw), _parse_length(bounds[1], raw)))
            else:
                values.add(_parse_length(part, raw))

        return cls(values=frozenset(values), ranges=tuple(ranges))

    @property
    def empty(self) -> bool:
        return not self.values and not self.ranges

    def matches(self, length: int) -> bool:
        if length in self.values:
            return True
        return any(low <= length <= high for low, high in self.ranges)

    def __str__(self) -> str:
        parts = [str(v) for v in sorted(self.values)]
        parts += [f"{low}-{high}" for low, high in self.ranges]
        return ",".join(parts) or "none"


@dataclass(frozen=True)
class FilterBody:
    text: str = ""

    @classmethod
    def parse(cls, raw: Optional[str]) -> "FilterBody":
        return cls(raw or "")

    @property
    def empty(self) -> bool:
        return not self.text

    def matches(self, body: Optional[str]) -> bool:
        if self.empty or body is None:
            return False
        return self.text in body

    def __str__(self) -> str:
        return repr(self.text) if self.text else "none"


@dataclass(frozen=True)
class FilterSet:
    """
    Combined suppression policy applied to every response

    Args:
    - status_codes (FrozenSet[int]): Excluded status codes
    - content_length (FilterContentLength): Excluded lengths and ranges
    - body (FilterBody): Excluded body text
    """

    status_codes: FrozenSet[int] = frozenset({404})
    content_length: FilterContentLength = field(default_factory=FilterContentLength)
    body: FilterBody = field(default_factory=FilterBody)

    @property
    def needs_body(self) -> bool:
        return not self.body.empty

    def with_overrides(
        self,
        status_codes: Optional[Iterable[int]] = None,
        content_length: Optional[FilterContentLength] = None,
        body: Optional[FilterBody] = None,
    ) -> "FilterSet":
        """
        Copy of this filter set with only the given fields replaced

        Returns:
        - FilterSet: The new filter set
        """

        changes = {}
        if status_codes is not None:
            changes["status_codes"] = frozenset(status_codes)
        if content_length is not None:
            changes["content_length"] = content_length
        if body is not None:
            changes["body"] = body
        return replace(self, **changes)

    def should_suppress(self, result: ProbeResult) -> bool:
        """
        Decide whether a response is filtered out

        Args:
        - result (ProbeResult): A result with a status code

        Returns:
        - bool: True if any exclusion matches
        """

        if result.failed:
            return False
        return (
            result.status_code in self.status_codes
            or self.content_length.matches(result.content_length)
            or self.body.matches(result.body)
        )

    def apply(self, result: ProbeResult) -> ProbeResult:
        result.reported = not result.failed and not self.should_suppress(result)
        return result

    def describe(self) -> str:
        codes = ",".join(str(c) for c in sorted(self.status_codes)) or "none"
        return f"status={codes} length={self.content_length} body={self.body}"


DEFAULT_FILTERS = FilterSet(
    status_codes=parse_status_codes(Constants.DEFAULT_FILTER_STATUS_CODES)
)
