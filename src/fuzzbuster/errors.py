"""
Exception hierarchy
"""


class FuzzerError(Exception):
    """
    Base class for every error raised by fuzzbuster
    """


class ConfigurationError(FuzzerError):
    """
    Raised before a run starts when the configuration can't be used,
    e.g. no placeholder in any template or a malformed filter
    """


class TransportError(FuzzerError):
    """
    A single request failed to produce a response (connection failure,
    timeout, malformed response)

    Args:
    - message (str): Short description of the failure
    - url (str): The request URL that failed
    """

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.url = url
