import typing
from urllib.parse import urlparse

from pydantic import BaseModel, field_validator

from index_fetch.utils.base_types import Backend


class Entry(BaseModel):
    """
    One configured index: where it lives and which backend serves it.

    When `backend` is omitted it is taken from the URL scheme.
    """

    name: str
    url: str
    backend: typing.Optional[Backend] = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("url must not be empty")
        return v.strip()

    @property
    def resolved_backend(self) -> str:
        if self.backend is not None:
            return self.backend
        return urlparse(self.url).scheme

    class Config:
        extra = "forbid"
        frozen = True
