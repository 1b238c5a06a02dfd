import logging
import typing

from index_fetch.fetch.context import FetchContext
from index_fetch.fetch.errors import UnsupportedBackendError
from index_fetch.fetch.http_fetcher import HttpObjectFetcher
from index_fetch.fetch.object_fetcher import ObjectFetcher
from index_fetch.fetch.s3_fetcher import S3ObjectFetcher
from index_fetch.models.entry_models import Entry
from index_fetch.utils.uri_utils import ObjectLocation, parse_object_uri

_LOGGER = logging.getLogger(__name__)

FETCHER_FACTORIES: dict[str, typing.Callable[[FetchContext], ObjectFetcher]] = {
    "s3": lambda ctx: S3ObjectFetcher.from_session(ctx=ctx),
    "https": lambda ctx: HttpObjectFetcher(scheme="https"),
    "http": lambda ctx: HttpObjectFetcher(scheme="http"),
}


def fetcher_for_backend(backend: str, ctx: FetchContext) -> ObjectFetcher:
    factory = FETCHER_FACTORIES.get(backend)
    if factory is None:
        raise UnsupportedBackendError(f"Unsupported index backend: {backend!r}")
    return factory(ctx)


def fetch_index(ctx: FetchContext, entry: Entry, fetcher: typing.Optional[ObjectFetcher] = None) -> bytes:
    """
    Fetches the raw bytes of the index described by `entry`.

    The entry URL is resolved against the backend's schemes before any
    client is created, so a bad URL never costs a session. Pass `fetcher`
    to use a pre-configured client instead of the default for the backend.
    """
    backend = entry.resolved_backend
    if backend not in FETCHER_FACTORIES:
        raise UnsupportedBackendError(f"Unsupported index backend: {backend!r}", uri=entry.url)

    location = parse_object_uri(entry.url, schemes=(backend,), keep_query=backend in HttpObjectFetcher.schemes)
    if fetcher is not None:
        return _fetch_with(ctx, entry, fetcher, location)

    default_fetcher = fetcher_for_backend(backend, ctx)
    try:
        return _fetch_with(ctx, entry, default_fetcher, location)
    finally:
        default_fetcher.close()


def _fetch_with(ctx: FetchContext, entry: Entry, fetcher: ObjectFetcher, location: ObjectLocation) -> bytes:
    _LOGGER.info(f"Fetching index {entry.name} from {entry.url}")
    data = fetcher.fetch(ctx, location)
    _LOGGER.info(f"Fetched index {entry.name}: {len(data)} bytes")
    return data
