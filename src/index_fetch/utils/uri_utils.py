import logging
import typing
from urllib.parse import urlparse

from index_fetch.fetch.errors import MalformedUriError
from index_fetch.utils.base_types import BucketName, ObjectKey

_LOGGER = logging.getLogger(__name__)


class ObjectLocation(typing.NamedTuple):
    """Bucket and key of a single remote object."""

    bucket: BucketName
    key: ObjectKey


def parse_object_uri(
    uri: str,
    *,
    schemes: typing.Optional[typing.Collection[str]] = None,
    keep_query: bool = False,
) -> ObjectLocation:
    """
    Splits `scheme://bucket/key` into an ObjectLocation.

    The bucket is the URI authority and the key is the path without its
    leading slashes. Nothing else is normalized.

    Args:
        uri: URI of the object, e.g. "s3://my-bucket/path/to/index.yaml"
        schemes: when given, the only schemes accepted
        keep_query: append "?query" to the key (HTTP objects) instead of
            rejecting URIs that carry a query string

    Raises:
        MalformedUriError: if the URI has no scheme, bucket or key, its
            scheme is not one of `schemes`, or it has a query (unless
            `keep_query`) or a fragment
    """
    if not uri:
        raise MalformedUriError("URI is required", uri=uri)

    parsed = urlparse(uri)
    if not parsed.scheme:
        raise MalformedUriError(f"URI missing scheme: {uri}", uri=uri)
    if schemes is not None and parsed.scheme not in schemes:
        raise MalformedUriError(f"Unsupported URI scheme '{parsed.scheme}': {uri}", uri=uri)

    bucket = parsed.netloc
    key = parsed.path.lstrip("/")
    if not bucket:
        raise MalformedUriError(f"URI missing bucket: {uri}", uri=uri)
    if not key:
        raise MalformedUriError(f"URI missing key: {uri}", uri=uri)
    if parsed.fragment:
        raise MalformedUriError(f"URI must not have a fragment: {uri}", uri=uri)
    if parsed.query:
        if not keep_query:
            raise MalformedUriError(f"URI must not have a query string: {uri}", uri=uri)
        key = f"{key}?{parsed.query}"

    _LOGGER.debug(f"Parsed {uri} into bucket={bucket} key={key}")
    return ObjectLocation(bucket=BucketName(bucket), key=ObjectKey(key))


def location_to_uri(location: ObjectLocation, scheme: str = "s3") -> str:
    return f"{scheme}://{location.bucket}/{location.key}"


def bucket_name_and_key_to_http_url(region: str, bucket_name: str, bucket_key: str) -> str:
    return f"https://{bucket_name}.s3.{region}.amazonaws.com/{bucket_key}"
