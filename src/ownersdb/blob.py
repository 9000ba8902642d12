"""
Blob storage access for cached package archives.

Archives are stored as ``<abi>.zip`` next to the container path of the
base URL. The base URL may carry a SAS token as its query string, which
must follow the blob name unchanged::

    https://acct.blob.core.windows.net/container/?sv=2020
    -> https://acct.blob.core.windows.net/container/<abi>.zip?sv=2020
"""

import httpx
import structlog

from .errors import BlobURLError, PackageFetchError

logger = structlog.get_logger()

__all__ = [
    "BlobFetcher",
    "build_blob_url",
    "redact_url",
    "validate_base_url",
]

_ALLOWED_SCHEMES = ("http", "https")


def _split_base_url(base_url: str) -> tuple[str, str, str]:
    """Split a base URL into (origin, path, query) with the raw query kept.

    The query is returned with its leading ``?`` (or empty). Fragments are
    dropped.

    Raises:
        BlobURLError: If the URL has no http(s) scheme or no host.
    """
    without_fragment = base_url.strip().split("#", 1)[0]
    head, sep, query = without_fragment.partition("?")
    head = head.rstrip("/\\")

    try:
        url = httpx.URL(head)
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        raise BlobURLError(f"Invalid blob base URL provided: {base_url} -- {e}") from e

    if url.scheme not in _ALLOWED_SCHEMES or not url.host:
        raise BlobURLError(
            f"Invalid blob base URL provided: {base_url} -- expected http(s)://<host>/<container>"
        )

    origin = f"{url.scheme}://{url.netloc.decode('ascii')}"
    path = url.raw_path.decode("ascii")
    return origin, path, f"{sep}{query}" if query else ""


def build_blob_url(base_url: str, abi: str) -> str:
    """Build the URL of the ``<abi>.zip`` archive under ``base_url``.

    Trailing slashes of the base path are stripped and the original query
    string (SAS token) is re-appended verbatim.

    Raises:
        BlobURLError: If ``base_url`` is malformed.
    """
    origin, path, query = _split_base_url(base_url)
    return f"{origin}{path.rstrip('/')}/{abi}.zip{query}"


def validate_base_url(base_url: str) -> None:
    """Raise BlobURLError if ``base_url`` cannot be used to build blob URLs."""
    _split_base_url(base_url)


def redact_url(url: str) -> str:
    """Hide the query string (SAS token) of a URL for logging."""
    head, sep, _ = url.partition("?")
    return f"{head}?<redacted>" if sep else head


class BlobFetcher:
    """Downloads package archives over HTTP(S).

    One GET per archive, no retries: a failure is reported to the caller
    as PackageFetchError and the caller decides whether to continue.
    """

    def __init__(self, timeout: float = 60.0, client: httpx.Client | None = None):
        """Initialize the fetcher.

        Args:
            timeout: Per-request timeout in seconds.
            client: Pre-built httpx client (tests inject a MockTransport here).
        """
        self._owns_client = client is None
        self.http = client or httpx.Client(timeout=timeout, follow_redirects=True)
        self.log = logger.bind(component="blob_fetcher")

    def fetch(self, port: str, url: str) -> bytes:
        """Download ``url`` and return the body.

        Raises:
            PackageFetchError: On HTTP status >= 400 or any transport error.
        """
        try:
            response = self.http.get(url)
        except httpx.HTTPError as e:
            raise PackageFetchError(port, f"transport error fetching {redact_url(url)}: {e}") from e

        if response.status_code >= 400:
            raise PackageFetchError(
                port, f"HTTP {response.status_code} while fetching {redact_url(url)}"
            )

        self.log.debug(
            "blob.fetch.complete",
            port=port,
            url=redact_url(url),
            bytes=len(response.content),
        )
        return response.content

    def close(self) -> None:
        if self._owns_client:
            self.http.close()

    def __enter__(self) -> "BlobFetcher":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
