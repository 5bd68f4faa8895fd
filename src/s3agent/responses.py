"""Translation of raw transport responses into s3agent results.

Outcome classes per operation:

    put     success -> None            otherwise OperationFailed
    get     success + body -> S3Object otherwise None (not found and empty
                                       object are the same outcome)
    head    success -> ObjectMetadata  otherwise None
    list    success -> ObjectListing   otherwise OperationFailed
    delete  the response's success flag, as-is
"""

import email.utils
import io
import re
from datetime import timezone
from enum import Enum

from s3agent.errors import OperationFailed, ParseError
from s3agent.models import ObjectListing, ObjectMetadata, S3Object, display_name_for_key
from s3agent.transport import TransportResponse
from s3agent.xml_utils import parse_list_bucket_result

_DIGITS_RE = re.compile(r"[0-9]+")


class Operation(str, Enum):
    """The five object operations. LIST is sent as a GET on the bucket."""

    PUT = "PUT"
    GET = "GET"
    HEAD = "HEAD"
    LIST = "LIST"
    DELETE = "DELETE"

    @property
    def http_method(self) -> str:
        return "GET" if self is Operation.LIST else self.value


def parse_http_date(date_str: str) -> int:
    """Parse an RFC 1123 date into epoch milliseconds.

    Accepts both numeric zones (``+0000``) and ``GMT``.

    Args:
        date_str: The header value, e.g. ``Wed, 21 Oct 2015 07:28:00 GMT``.

    Returns:
        The instant in milliseconds since the epoch.

    Raises:
        ParseError: If the value is empty or not a valid date.
    """
    try:
        dt = email.utils.parsedate_to_datetime(date_str)
    except (ValueError, TypeError, IndexError):
        raise ParseError(f"Invalid date: {date_str!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp()) * 1000 + dt.microsecond // 1000


def _parse_content_length(value: str | None) -> int:
    """Parse Content-Length, falling back to 0 when missing or unparseable."""
    if value is None:
        return 0
    value = value.strip()
    if not _DIGITS_RE.fullmatch(value):
        return 0
    return int(value)


def translate_put(response: TransportResponse, key: str) -> None:
    """Raise OperationFailed unless the put succeeded."""
    if not response.is_successful:
        raise OperationFailed(
            "put",
            key,
            response.status_code,
            response.status_message,
            response.body_text(),
        )


def translate_get(response: TransportResponse, bucket: str, key: str) -> S3Object | None:
    """Wrap a successful body in an S3Object; anything else is absent."""
    if response.is_successful and response.body is not None:
        return S3Object(bucket=bucket, key=key, content=io.BytesIO(response.body))
    return None


def translate_head(response: TransportResponse, bucket: str, key: str) -> ObjectMetadata | None:
    """Build ObjectMetadata from the response headers of a successful head.

    Raises:
        ParseError: If Last-Modified is missing or unparseable.
    """
    if not response.is_successful:
        return None

    return ObjectMetadata(
        bucket=bucket,
        key=key,
        display_name=display_name_for_key(key),
        content_length=_parse_content_length(response.header("Content-Length")),
        content_type=response.header("Content-Type") or "",
        last_modified=parse_http_date(response.header("Last-Modified") or ""),
    )


def translate_list(response: TransportResponse, path: str) -> ObjectListing:
    """Parse the listing body of a successful list.

    Raises:
        OperationFailed: On a non-2xx response.
        ParseError: On a malformed listing document.
    """
    if not response.is_successful:
        raise OperationFailed(
            "list",
            path,
            response.status_code,
            response.status_message,
            response.body_text(),
        )
    if response.body is None:
        raise ParseError("Empty listing response body")
    return parse_list_bucket_result(response.body)


def translate_delete(response: TransportResponse) -> bool:
    return response.is_successful


def translate(
    response: TransportResponse,
    operation: Operation,
    bucket: str,
    key: str = "",
) -> S3Object | ObjectMetadata | ObjectListing | bool | None:
    """Translate a response for the given operation.

    Args:
        response: The raw transport response.
        operation: Which operation produced it.
        bucket: The bucket the request targeted.
        key: The object key, or the listing path for ``list``.

    Returns:
        The operation's result (see module docstring).
    """
    if operation is Operation.PUT:
        return translate_put(response, key)
    if operation is Operation.GET:
        return translate_get(response, bucket, key)
    if operation is Operation.HEAD:
        return translate_head(response, bucket, key)
    if operation is Operation.LIST:
        return translate_list(response, key)
    return translate_delete(response)
