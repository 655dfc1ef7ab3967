from dataclasses import dataclass
from typing import List, Optional, Tuple

from fuzzbuster.errors import ConfigurationError
from fuzzbuster.resolver import RequestTemplate
from fuzzbuster.utility.configuration import Configuration

"""
Static configuration
"""


@dataclass(frozen=True)
class FuzzerStaticConfig:
    url: str
    method: str
    headers: Tuple[Tuple[str, str], ...]
    body: str
    template: RequestTemplate

    @classmethod
    def build_fuzzer_config(
        cls,
        utility: Configuration,
        method: str,
        header: Optional[List[str]] = None,
        body: Optional[str] = None,
    ) -> "FuzzerStaticConfig":
        """
        Builds the request templates of a run

        Raises:
        - ConfigurationError: If the URL is invalid, a header is malformed or
          no template contains the placeholder
        """

        url = utility.validate_url()
        if url is None:
            raise ConfigurationError(f"Invalid target URL: {utility.url}")

        headers = tuple(utility.parse_headers(header or []))
        template = RequestTemplate(url=url, method=method, headers=headers, body=body)

        return FuzzerStaticConfig(
            url=url,
            method=template.method,
            headers=headers,
            body=template.body,
            template=template,
        )
