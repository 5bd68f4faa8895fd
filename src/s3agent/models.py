"""Data model types returned by the s3agent operations.

These dataclasses are the domain results of ``head``, ``get`` and ``list``,
plus the credentials the agent holds for its lifetime.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import BinaryIO


@dataclass(frozen=True)
class Credentials:
    """Access key pair for the legacy HMAC signing scheme.

    Attributes:
        access_key: The public access key id, sent in the Authorization header.
        secret_key: The secret used as HMAC key. Never logged or sent.
    """

    access_key: str
    secret_key: str = field(repr=False)


@dataclass
class ObjectMetadata:
    """Metadata for a stored object, produced by ``head``.

    Attributes:
        bucket: The bucket name.
        key: The object key.
        display_name: Final path segment of the key.
        content_length: Size in bytes.
        content_type: MIME type, or "" when the provider sent none.
        last_modified: Last-Modified instant in epoch milliseconds.
    """

    bucket: str
    key: str
    display_name: str
    content_length: int = 0
    content_type: str = ""
    last_modified: int = 0


@dataclass
class S3Object:
    """An object body returned by ``get``.

    The caller owns ``content`` and must read it to the end or close it.
    Use as a context manager to close it on every exit path.
    """

    bucket: str
    key: str
    content: BinaryIO

    def read(self, size: int = -1) -> bytes:
        return self.content.read(size)

    def close(self) -> None:
        self.content.close()

    def __enter__(self) -> S3Object:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass
class S3ObjectSummary:
    """One entry of a bucket listing.

    Attributes:
        bucket: The bucket name.
        key: The object key.
        size: Size in bytes.
    """

    bucket: str
    key: str
    size: int


@dataclass
class ObjectListing:
    """Result container for ``list``.

    Entries keep the order the provider returned them in. ``is_truncated``
    is reported but never followed; the caller passes a new marker to fetch
    the next page.

    Attributes:
        bucket_name: The bucket name as reported by the provider.
        entries: Object summaries in provider order.
        is_truncated: Whether the provider holds more keys past this page.
    """

    bucket_name: str
    entries: list[S3ObjectSummary] = field(default_factory=list)
    is_truncated: bool = False

    @property
    def keys(self) -> list[str]:
        return [entry.key for entry in self.entries]

    def __iter__(self) -> Iterator[S3ObjectSummary]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def display_name_for_key(key: str) -> str:
    """Return the final path segment of a key (after the last / or \\)."""
    return re.split(r"[/\\]", key)[-1]
