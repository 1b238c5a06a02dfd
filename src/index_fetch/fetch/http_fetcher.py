import logging
import typing

import requests

from index_fetch.fetch.context import FetchContext
from index_fetch.fetch.errors import (
    FetchCancelledError,
    MalformedUriError,
    NotFoundError,
    ReadError,
    RemoteError,
)
from index_fetch.fetch.object_fetcher import ObjectFetcher
from index_fetch.utils.uri_utils import ObjectLocation, location_to_uri

_LOGGER = logging.getLogger(__name__)

CHUNK_SIZE_BYTES = 64 * 1024


class HttpObjectFetcher(ObjectFetcher):
    """
    Reads whole objects served over plain HTTP(S).

    The location's bucket is the host and its key the path, so
    "https://example.com/index.yaml" resolves to bucket "example.com" and key
    "index.yaml". The request timeout follows the context deadline.
    """

    schemes = ("https", "http")

    def __init__(self, session: typing.Optional[requests.Session] = None, *, scheme: str = "https") -> None:
        if scheme not in self.schemes:
            raise ValueError(f"Unsupported scheme for HTTP fetcher: {scheme}")
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.scheme = scheme

    def close(self) -> None:
        # an injected session belongs to the caller
        if self._owns_session:
            self.session.close()

    def fetch(self, ctx: FetchContext, location: ObjectLocation) -> bytes:
        url = location_to_uri(location, scheme=self.scheme)
        if not location.bucket or not location.key:
            raise MalformedUriError(f"Host and path are required: {url}", uri=url)
        timeout = ctx.request_timeout(uri=url)

        _LOGGER.info(f"Getting {url}")
        try:
            response = self.session.get(url, stream=True, timeout=timeout)
        except requests.exceptions.Timeout as e:
            _LOGGER.error(f"Request to {url} timed out")
            if ctx.done():
                raise FetchCancelledError(f"Fetch deadline exceeded: {url}", uri=url) from e
            raise RemoteError(f"Request to {url} timed out", uri=url) from e
        except requests.exceptions.RequestException as e:
            _LOGGER.error(f"Request to {url} failed: {e}")
            raise RemoteError(f"Unable to get {url}: {e}", uri=url) from e

        try:
            self._check_status(response, url)
            return self._drain(ctx, response, url)
        finally:
            response.close()

    def _check_status(self, response: requests.Response, url: str) -> None:
        if response.status_code == 404:
            _LOGGER.error(f"{url} not found")
            raise NotFoundError(f"Object not found: {url}", uri=url, error_code="404")
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            _LOGGER.error(f"Unable to get {url} (status: {response.status_code}): {e}")
            raise RemoteError(f"Unable to get {url}: {e}", uri=url, error_code=str(response.status_code)) from e

    def _drain(self, ctx: FetchContext, response: requests.Response, url: str) -> bytes:
        chunks: list[bytes] = []
        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE_BYTES):
                ctx.raise_if_done(uri=url)
                chunks.append(chunk)
        except (requests.exceptions.RequestException, OSError) as e:
            _LOGGER.error(f"Error reading {url}: {e}")
            raise ReadError(f"Error reading {url}: {e}", uri=url) from e

        data = b"".join(chunks)
        _LOGGER.info(f"Read {len(data)} bytes from {url}")
        return data
