from typing import Iterable, List, Optional, Tuple

from fuzzbuster.config.constants import Constants
from fuzzbuster.errors import ConfigurationError
from fuzzbuster.models import ResolvedRequest

"""
Placeholder resolution
"""


def resolve(template: str, word: str, placeholder: str = Constants.FUZZ) -> str:
    """
    Replace every occurrence of the placeholder with the word, verbatim

    Args:
    - template (str): URL, header or body template
    - word (str): Candidate word to insert

    Returns:
    - str: The substituted string
    """

    if not template:
        return template
    return template.replace(placeholder, word)


class RequestTemplate:
    """
    Holds the URL, header and body templates of a run and builds one
    ResolvedRequest per word

    Args:
    - url (str): URL template
    - method (str): HTTP method
    - headers (Iterable[Tuple[str, str]]): Header name/value templates, in order
    - body (str): Body template, may be empty
    """

    def __init__(
        self,
        url: str,
        method: str = Constants.DEFAULT_METHOD,
        headers: Optional[Iterable[Tuple[str, str]]] = None,
        body: Optional[str] = None,
        placeholder: str = Constants.FUZZ,
    ) -> None:
        self.url = url
        self.method = method.upper()
        self.headers: Tuple[Tuple[str, str], ...] = tuple(headers or ())
        self.body = body or ""
        self.placeholder = placeholder

        # requests matches header names case-insensitively, a later duplicate would win
        seen = set()
        for name, _ in self.headers:
            if name.lower() in seen:
                raise ConfigurationError(f"Header {name} is given more than once")
            seen.add(name.lower())

        if not self.fuzzed_locations():
            raise ConfigurationError(
                f"Placeholder {placeholder} not found in the URL, headers or body"
            )

    def fuzzed_locations(self) -> List[str]:
        """
        Lists where the placeholder occurs

        Returns:
        - List[str]: Any of "url", "header:<name>", "body"
        """

        locations = []
        if self.placeholder in self.url:
            locations.append("url")
        for name, value in self.headers:
            if self.placeholder in name or self.placeholder in value:
                locations.append(f"header:{name}")
        if self.placeholder in self.body:
            locations.append("body")
        return locations

    def build(self, word: str) -> ResolvedRequest:
        """
        Substitute the word into every template

        Args:
        - word (str): Candidate word

        Returns:
        - ResolvedRequest: The request to send for this word
        """

        headers = tuple(
            (resolve(name, word, self.placeholder), resolve(value, word, self.placeholder))
            for name, value in self.headers
        )
        return ResolvedRequest(
            method=self.method,
            url=resolve(self.url, word, self.placeholder),
            headers=headers,
            body=resolve(self.body, word, self.placeholder),
        )
