"""HTTP transport for tinygit.

The pipeline talks to the network only through the HttpTransport protocol
so tests can substitute a recording fake. RequestsTransport is the real
implementation.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Protocol

import requests

from tinygit.config import Settings

CHUNK_SIZE = 8192


class TransportError(Exception):
    """Raised when a request fails before an HTTP status is received."""


class HttpTransport(Protocol):
    """Protocol for the two kinds of GET the pipeline performs."""

    def fetch_text(self, url: str) -> str | None:
        """Return the body of a 200 response, or None on any failure."""
        ...

    def download(self, url: str, destination: Path) -> int:
        """Stream the response body into destination and return the status.

        Raises TransportError if no response was received.
        """
        ...


class RequestsTransport:
    """HttpTransport backed by a requests Session.

    Redirects are followed and every request carries the configured
    User-Agent. The configured timeout bounds each connect and read, and
    also caps the whole of an archive download.
    """

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self._timeout = settings.timeout_seconds
        self._session = session or requests.Session()
        self._session.headers["User-Agent"] = settings.user_agent

    def fetch_text(self, url: str) -> str | None:
        """GET url and return the body text if the status is exactly 200."""
        try:
            response = self._session.get(url, timeout=self._timeout, allow_redirects=True)
        except requests.RequestException:
            return None
        if response.status_code != 200:
            return None
        return response.text

    def download(self, url: str, destination: Path) -> int:
        """GET url and write the body to destination, whatever the status.

        The destination is created or truncated before any bytes arrive.
        A transfer still running after the timeout raises TransportError.
        """
        deadline = time.monotonic() + self._timeout
        try:
            with self._session.get(
                url, timeout=self._timeout, allow_redirects=True, stream=True
            ) as response, destination.open("wb") as fh:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if time.monotonic() > deadline:
                        msg = f"Download of {url} exceeded {self._timeout}s"
                        raise TransportError(msg)
                    if chunk:
                        fh.write(chunk)
                return response.status_code
        except requests.RequestException as e:
            msg = f"Request to {url} failed: {e}"
            raise TransportError(msg) from e

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()
