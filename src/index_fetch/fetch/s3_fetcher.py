import logging
import typing

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError, PartialCredentialsError

from index_fetch.fetch.context import FetchContext
from index_fetch.fetch.errors import (
    FetchCancelledError,
    MalformedUriError,
    NotFoundError,
    ReadError,
    RemoteError,
    SessionError,
)
from index_fetch.fetch.object_fetcher import ObjectFetcher
from index_fetch.utils.aws_env_vars import get_aws_region, get_s3_endpoint_url
from index_fetch.utils.uri_utils import ObjectLocation, bucket_name_and_key_to_http_url, location_to_uri

_LOGGER = logging.getLogger(__name__)

CHUNK_SIZE_BYTES = 64 * 1024

_NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "404", "NotFound"})


class S3ObjectFetcher(ObjectFetcher):
    """
    Reads whole S3 objects through an injected boto3 S3 client.

    A single GetObject is issued per fetch. The response body is drained in
    chunks so the context is honored while reading, and it is closed on
    every exit path.
    """

    schemes = ("s3",)

    def __init__(self, client: typing.Any) -> None:
        self.client = client

    @classmethod
    def from_session(
        cls,
        session: typing.Optional[boto3.session.Session] = None,
        *,
        region_name: typing.Optional[str] = None,
        endpoint_url: typing.Optional[str] = None,
        ctx: typing.Optional[FetchContext] = None,
    ) -> "S3ObjectFetcher":
        """
        Builds a fetcher whose client uses the ambient boto3 credential chain.

        Retries are disabled. When `ctx` carries a deadline, the client's
        connect and read timeouts are bounded by the time left.

        Raises:
            SessionError: if the session or client cannot be created
        """
        config_kwargs: dict[str, typing.Any] = {"retries": {"total_max_attempts": 1}}
        if ctx is not None:
            remaining = ctx.request_timeout()
            if remaining is not None:
                config_kwargs["connect_timeout"] = remaining
                config_kwargs["read_timeout"] = remaining

        try:
            session = session or boto3.session.Session()
            client = session.client(
                "s3",
                region_name=region_name or get_aws_region(),
                endpoint_url=endpoint_url or get_s3_endpoint_url(),
                config=Config(**config_kwargs),
            )
        except (BotoCoreError, ValueError) as e:
            # botocore reports a bad endpoint_url as a plain ValueError
            _LOGGER.error(f"Unable to create S3 client: {e}")
            raise SessionError(f"Unable to create AWS session: {e}") from e
        return cls(client)

    def fetch(self, ctx: FetchContext, location: ObjectLocation) -> bytes:
        uri = location_to_uri(location)
        if not location.bucket or not location.key:
            raise MalformedUriError(f"Bucket and key are required: {uri}", uri=uri)
        ctx.raise_if_done(uri=uri)

        _LOGGER.info(f"Getting S3 object {uri}")
        try:
            response = self.client.get_object(Bucket=location.bucket, Key=location.key)
        except (NoCredentialsError, PartialCredentialsError) as e:
            _LOGGER.error(f"No usable AWS credentials for {uri}: {e}")
            raise SessionError(f"Unable to create AWS session: {e}", uri=uri) from e
        except ClientError as e:
            error_code = str(e.response.get("Error", {}).get("Code", ""))
            _LOGGER.error(f"Unable to get S3 object {self._describe(location)} (code: {error_code}): {e}")
            if error_code in _NOT_FOUND_CODES:
                raise NotFoundError(f"S3 object not found: {uri}", uri=uri, error_code=error_code) from e
            raise RemoteError(f"Unable to get S3 object {uri}: {e}", uri=uri, error_code=error_code) from e
        except BotoCoreError as e:
            _LOGGER.error(f"Unable to get S3 object {uri}: {e}")
            if ctx.done():
                raise FetchCancelledError(f"Fetch cancelled: {uri}", uri=uri) from e
            raise RemoteError(f"Unable to get S3 object {uri}: {e}", uri=uri) from e

        body = response["Body"]
        try:
            return self._drain(ctx, body, uri)
        finally:
            body.close()

    def _drain(self, ctx: FetchContext, body: typing.Any, uri: str) -> bytes:
        chunks: list[bytes] = []
        try:
            for chunk in body.iter_chunks(chunk_size=CHUNK_SIZE_BYTES):
                ctx.raise_if_done(uri=uri)
                chunks.append(chunk)
        except FetchCancelledError:
            _LOGGER.info(f"Stopped reading {uri} after {sum(len(c) for c in chunks)} bytes")
            raise
        except (BotoCoreError, OSError) as e:
            _LOGGER.error(f"Error reading S3 object {uri}: {e}")
            if ctx.done():
                raise FetchCancelledError(f"Fetch cancelled: {uri}", uri=uri) from e
            raise ReadError(f"Error reading S3 object {uri}: {e}", uri=uri) from e

        data = b"".join(chunks)
        _LOGGER.info(f"Read {len(data)} bytes from {uri}")
        return data

    def _describe(self, location: ObjectLocation) -> str:
        region = getattr(getattr(self.client, "meta", None), "region_name", None)
        if not isinstance(region, str):
            return location_to_uri(location)
        return bucket_name_and_key_to_http_url(region, location.bucket, location.key)
