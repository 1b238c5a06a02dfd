import abc

from index_fetch.fetch.context import FetchContext
from index_fetch.utils.uri_utils import ObjectLocation


class ObjectFetcher(abc.ABC):
    """Retrieves the full content of one remote object per call."""

    schemes: tuple[str, ...] = ()

    @abc.abstractmethod
    def fetch(self, ctx: FetchContext, location: ObjectLocation) -> bytes:
        raise NotImplementedError

    def close(self) -> None:
        """Releases resources the fetcher created for itself."""
