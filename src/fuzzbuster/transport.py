import threading
import time

from typing import Dict, Optional

import requests

from fuzzbuster.config.constants import Constants
from fuzzbuster.errors import TransportError
from fuzzbuster.models import TransportResponse

"""
HTTP transport
"""


class HttpTransport:
    """
    Sends requests with a requests.Session per worker thread

    Redirects are never followed so that redirect status codes are
    reported as they are.

    Args:
    - timeout (float): Per-request timeout in seconds
    - verify_ssl (bool): Whether to verify TLS certificates
    - proxy (Dict[str, str]): Optional requests proxies mapping
    """

    def __init__(
        self,
        timeout: float = Constants.TIMEOUT,
        verify_ssl: bool = False,
        proxy: Optional[Dict[str, str]] = None,
    ) -> None:
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.proxy = proxy or {}
        self._local = threading.local()
        self._sessions = []
        self._sessions_lock = threading.Lock()

    def _session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = Constants.USER_AGENT
            session.verify = self.verify_ssl
            if self.proxy:
                session.proxies.update(self.proxy)
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: str = "",
        want_body: bool = True,
    ) -> TransportResponse:
        """
        Sends a single request

        Args:
        - method (str): HTTP method
        - url (str): Fully resolved URL
        - headers (Dict[str, str]): Request headers
        - body (str): Request body, empty for none
        - want_body (bool): Decode the response body into text, skipped when False

        Returns:
        - TransportResponse: Status code, body length in bytes, body text (None unless
          want_body) and elapsed seconds

        Raises:
        - TransportError: On timeout, connection failure or any other request error
        """

        start = time.monotonic()
        try:
            response = self._session().request(
                method=method,
                url=url,
                headers=headers,
                data=body.encode("utf-8") if body else None,
                allow_redirects=False,
                timeout=self.timeout,
            )
            content = response.content
        except requests.Timeout as e:
            raise TransportError(f"Timeout ({self.timeout}s)", url) from e
        except requests.ConnectionError as e:
            raise TransportError(f"Connection failed: {str(e)[:100]}", url) from e
        except requests.RequestException as e:
            raise TransportError(f"Request error: {str(e)[:100]}", url) from e

        return TransportResponse(
            status_code=response.status_code,
            content_length=len(content),
            body=response.text if want_body else None,
            elapsed=time.monotonic() - start,
        )

    def close(self) -> None:
        with self._sessions_lock:
            for session in self._sessions:
                session.close()
            self._sessions.clear()
