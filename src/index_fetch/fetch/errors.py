import typing

FetchPhase = typing.Literal["resolve", "session", "request", "read", "cancelled"]


class FetchError(Exception):
    """
    Base class for every failure raised while fetching an object.

    `phase` names the step that failed so callers can tell a bad URI apart
    from a remote rejection or a broken stream without string matching.
    """

    phase: FetchPhase = "request"

    def __init__(self, msg: str, *, uri: typing.Optional[str] = None) -> None:
        super().__init__(msg)
        self.uri = uri


class MalformedUriError(FetchError, ValueError):
    phase: FetchPhase = "resolve"


class UnsupportedBackendError(FetchError):
    phase: FetchPhase = "resolve"


class SessionError(FetchError):
    phase: FetchPhase = "session"


class RemoteError(FetchError):
    phase: FetchPhase = "request"

    def __init__(
        self,
        msg: str,
        *,
        uri: typing.Optional[str] = None,
        error_code: typing.Optional[str] = None,
    ) -> None:
        super().__init__(msg, uri=uri)
        self.error_code = error_code


class NotFoundError(RemoteError):
    pass


class ReadError(FetchError):
    phase: FetchPhase = "read"


class FetchCancelledError(FetchError):
    phase: FetchPhase = "cancelled"
