import threading
import time
import typing

from index_fetch.fetch.errors import FetchCancelledError


class FetchContext:
    """
    Cancellable, deadline-bearing handle threaded through a fetch.

    `cancel()` may be called from any thread. Fetchers call
    `raise_if_done()` before issuing network work and between body chunks,
    and use `remaining()` to bound in-flight requests.
    """

    def __init__(self, deadline: typing.Optional[float] = None) -> None:
        # deadline is on the time.monotonic() clock
        self.deadline = deadline
        self._cancelled = threading.Event()

    @classmethod
    def with_timeout(cls, timeout_seconds: float) -> "FetchContext":
        if timeout_seconds < 0:
            raise ValueError(f"timeout_seconds must not be negative: {timeout_seconds}")
        return cls(deadline=time.monotonic() + timeout_seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> typing.Optional[float]:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def done(self) -> bool:
        return self.cancelled or self.expired()

    def raise_if_done(self, *, uri: typing.Optional[str] = None) -> None:
        if self.cancelled:
            raise FetchCancelledError("Fetch cancelled", uri=uri)
        if self.expired():
            raise FetchCancelledError("Fetch deadline exceeded", uri=uri)

    def request_timeout(self, *, uri: typing.Optional[str] = None) -> typing.Optional[float]:
        """
        Seconds an outgoing request may take, or None without a deadline.

        Never returns zero: HTTP clients reject a zero timeout, so a deadline
        that has run out raises FetchCancelledError instead.
        """
        self.raise_if_done(uri=uri)
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise FetchCancelledError("Fetch deadline exceeded", uri=uri)
        return remaining
