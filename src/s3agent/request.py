"""Request construction for s3agent.

Turns (bucket, path, credentials, method, body) into a fully addressed,
fully signed :class:`RequestDescriptor`. Building never performs I/O and
reads time only through the injected clock.
"""

from __future__ import annotations

import email.utils
import urllib.parse
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import BinaryIO

from s3agent.auth import authorization_header, canonical_resource, strip_query, string_to_sign
from s3agent.models import Credentials

S3_API_SUFFIX = "amazonaws.com"
DEFAULT_REGION = "s3"
DEFAULT_CACHE_CONTROL = "no-cache"

# Query parameters accepted by list, in the order they are rendered.
LIST_PARAMS = ("prefix", "marker", "delimiter", "max-keys")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: the current instant in UTC."""
    return datetime.now(timezone.utc)


@dataclass
class PostData:
    """A request body with a caller-declared length.

    Attributes:
        content: The bytes to send, as a readable stream or a bytes object.
        length: Declared length, sent as Content-Length without measuring.
        content_type: Content-Type header value (also signed).
        cache_control: Cache-Control header value.
    """

    content: BinaryIO | bytes
    length: int
    content_type: str
    cache_control: str = DEFAULT_CACHE_CONTROL


@dataclass
class RequestDescriptor:
    """A single, fully headered HTTP request ready for the transport.

    Attributes:
        host: The virtual host (``<bucket>.<region>.<suffix>``).
        path: The encoded request path, including any query string.
        method: HTTP method.
        headers: Ordered (name, value) pairs.
        body: The request body, if any.
        scheme: URL scheme.
    """

    host: str
    path: str
    method: str = "GET"
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: PostData | None = None
    scheme: str = "https"

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host}{self.path}"

    def header(self, name: str) -> str | None:
        """Return the first header value matching ``name`` (case-insensitive)."""
        lower = name.lower()
        for header_name, value in self.headers:
            if header_name.lower() == lower:
                return value
        return None


# -- Addressing ---------------------------------------------------------------


def virtual_host_for_bucket(
    bucket: str, region: str = DEFAULT_REGION, api_suffix: str = S3_API_SUFFIX
) -> str:
    """Return the virtual host for a bucket, e.g. ``foo.s3.amazonaws.com``."""
    return f"{bucket}.{region}.{api_suffix}"


def path_for_key(key: str) -> str:
    """Encode an object key into a request path.

    The whole key is percent-encoded, ``/`` included. Keys without a
    leading slash get one prepended. A key that already starts with ``/``
    is encoded as-is, so its leading slash becomes ``%2F`` and the path has
    no root ``/``. That quirk is kept for wire compatibility.

    Args:
        key: The object key.

    Returns:
        The encoded request path.
    """
    encoded = urllib.parse.quote(key, safe="")
    if key.startswith("/"):
        return encoded
    return "/" + encoded


def list_path(
    prefix: str | None = None,
    marker: str | None = None,
    delimiter: str | None = None,
    max_keys: int | str | None = None,
    encode_values: bool = False,
) -> str:
    """Build the request path for a bucket listing.

    Only supplied parameters are rendered, always in the order prefix,
    marker, delimiter, max-keys. Values are sent verbatim unless
    ``encode_values`` is set, so by default a value containing ``&`` or
    ``=`` corrupts the query.

    Args:
        prefix: Restrict to keys starting with this prefix.
        marker: Start listing after this key.
        delimiter: Group keys sharing a prefix up to this delimiter.
        max_keys: Page size requested from the provider.
        encode_values: Percent-encode the values.

    Returns:
        ``/?`` followed by the ``&``-joined query string.
    """
    values = (prefix, marker, delimiter, max_keys)
    pairs = []
    for name, value in zip(LIST_PARAMS, values):
        if value is None:
            continue
        rendered = str(value)
        if encode_values:
            rendered = urllib.parse.quote(rendered, safe="")
        pairs.append(f"{name}={rendered}")
    return "/?" + "&".join(pairs)


# -- Dates --------------------------------------------------------------------


def format_date(moment: datetime) -> str:
    """Render an instant in the Date header format, in UTC.

    ``EEE, dd MMM yyyy HH:mm:ss Z``, e.g. ``Wed, 21 Oct 2015 07:28:00 +0000``.
    Day and month names are English regardless of locale. Naive datetimes
    are taken to be UTC already.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return email.utils.format_datetime(moment.astimezone(timezone.utc))


# -- Assembly -----------------------------------------------------------------


def build_request(
    bucket: str,
    path: str,
    credentials: Credentials,
    method: str = "GET",
    post_data: PostData | None = None,
    region: str = DEFAULT_REGION,
    clock: Clock = utc_now,
    api_suffix: str = S3_API_SUFFIX,
    scheme: str = "https",
) -> RequestDescriptor:
    """Assemble a signed request descriptor.

    Header order is Authorization, Host, Date; a body adds Content-Length
    (the declared length, trusted as-is), Content-Type and Cache-Control.

    Args:
        bucket: The bucket name.
        path: The encoded request path (see :func:`path_for_key` and
            :func:`list_path`). Only the part before ``?`` is signed.
        credentials: The access key pair.
        method: HTTP method.
        post_data: The request body, if any.
        region: Region label used in the virtual host.
        clock: Time source for the Date header.
        api_suffix: Domain suffix of the provider API.
        scheme: URL scheme.

    Returns:
        A new RequestDescriptor.
    """
    host = virtual_host_for_bucket(bucket, region, api_suffix)
    date = format_date(clock())

    resource = canonical_resource(bucket, strip_query(path))
    content_type = post_data.content_type if post_data is not None else ""
    to_sign = string_to_sign(method, date, resource, "", content_type)
    auth = authorization_header(credentials.access_key, credentials.secret_key, to_sign)

    headers = [
        ("Authorization", auth),
        ("Host", host),
        ("Date", date),
    ]
    if post_data is not None:
        headers.append(("Content-Length", str(post_data.length)))
        headers.append(("Content-Type", post_data.content_type))
        headers.append(("Cache-Control", post_data.cache_control))

    return RequestDescriptor(
        host=host,
        path=path,
        method=method,
        headers=headers,
        body=post_data,
        scheme=scheme,
    )
