"""Archive download."""

from pathlib import Path

from tinygit.http import HttpTransport, TransportError


class DownloadFailedError(Exception):
    """Raised when an archive download does not end in HTTP 200.

    Attributes:
        url: URL that was requested.
        status_code: HTTP status received, or None on transport failure.
    """

    def __init__(self, url: str, status_code: int | None, reason: str | None = None) -> None:
        self.url = url
        self.status_code = status_code
        if status_code is not None:
            detail = f"HTTP {status_code}"
        else:
            detail = reason or "no response"
        super().__init__(f"Download of {url} failed: {detail}")


def retrieve_archive(transport: HttpTransport, url: str, destination: Path) -> Path:
    """Download url into destination.

    Any status other than exactly 200 is a failure. On failure the
    destination may hold a partial or error body; removing it is the
    caller's job.

    Args:
        transport: HTTP transport to download with.
        url: Archive URL.
        destination: File to create or overwrite.

    Returns:
        The destination path.

    Raises:
        DownloadFailedError: On transport failure or a non-200 status.
    """
    try:
        status = transport.download(url, destination)
    except TransportError as e:
        raise DownloadFailedError(url, None, str(e)) from e

    if status != 200:
        raise DownloadFailedError(url, status)
    return destination
