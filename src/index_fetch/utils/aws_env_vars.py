import os
import typing


def _get_optional_by_env_var(env_var: str) -> typing.Optional[str]:
    value = os.environ.get(env_var)
    if not value:
        return None
    return value


def get_aws_region() -> typing.Optional[str]:
    return _get_optional_by_env_var("AWS_REGION")


def get_s3_endpoint_url() -> typing.Optional[str]:
    """
    Endpoint override for S3-compatible stores (MinIO, localstack, ...).
    Unset means the regular AWS endpoint for the region.
    """
    return _get_optional_by_env_var("S3_ENDPOINT_URL")
