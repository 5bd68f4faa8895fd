"""Legacy HMAC-SHA1 request signing for s3agent.

Implements the canonicalization and signing halves of the provider's
original ("AWS" scheme) header authentication:

    StringToSign = Method + "\\n" + Content-MD5 + "\\n" + Content-Type + "\\n"
                   + Date + "\\n" + CanonicalResource
    Signature    = Base64(HMAC-SHA1(SecretKey, UTF-8(StringToSign)))
    Authorization: AWS <AccessKey>:<Signature>

Everything here is a pure function of its arguments: no clock, no I/O and
no caching, so two calls with identical inputs yield identical output.

Known limitation: ``x-amz-*`` headers are never canonicalized. Requests
that depend on them (server-side encryption, ACL headers, session tokens)
are not supported.

References:
    - https://docs.aws.amazon.com/AmazonS3/latest/userguide/RESTAuthentication.html
"""

import base64
import hashlib
import hmac

# Constants
SIGNATURE_SCHEME = "AWS"


# -- Canonicalization ---------------------------------------------------------


def strip_query(path: str) -> str:
    """Return the part of a request path eligible for canonicalization.

    Only the component before the first ``?`` takes part in signing; a
    ``#fragment`` is dropped as well.

    Args:
        path: A request path, possibly carrying a query string.

    Returns:
        The path without query string or fragment.
    """
    return path.split("?", 1)[0].split("#", 1)[0]


def canonical_resource(bucket: str, path_without_query: str, subresource: str = "") -> str:
    """Build the canonical resource for a virtual-hosted request.

    Args:
        bucket: The bucket name (taken from the Host header by the provider).
        path_without_query: The encoded request path, query already stripped.
        subresource: An optional signed sub-resource such as ``?acl``.

    Returns:
        ``/`` + bucket + path + subresource.
    """
    return "/" + bucket + path_without_query + subresource


def string_to_sign(
    method: str,
    date: str,
    resource: str,
    content_md5: str = "",
    content_type: str = "",
) -> str:
    """Build the newline-joined string the signature is computed over.

    Args:
        method: HTTP method (uppercase).
        date: The exact value sent in the Date header.
        resource: Output of :func:`canonical_resource`.
        content_md5: Base64 Content-MD5 header value, or "" when absent.
        content_type: Content-Type header value, or "" when absent.

    Returns:
        Five fields joined by ``\\n``, with no trailing newline.
    """
    return "\n".join([method, content_md5, content_type, date, resource])


# -- Signing ------------------------------------------------------------------


def sign(secret_key: str, string_to_sign: str) -> str:
    """Compute the base64 HMAC-SHA1 signature of a string-to-sign.

    The input is signed byte-for-byte as UTF-8; it is not trimmed or
    normalized in any way.

    Args:
        secret_key: The secret access key.
        string_to_sign: Output of :func:`string_to_sign`.

    Returns:
        The base64-encoded 20-byte digest.
    """
    digest = hmac.new(
        secret_key.encode("utf-8"), string_to_sign.encode("utf-8"), hashlib.sha1
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def authorization_header(access_key: str, secret_key: str, string_to_sign: str) -> str:
    """Build the Authorization header value for a string-to-sign.

    Args:
        access_key: The access key id, sent in the clear.
        secret_key: The secret access key, used only as HMAC key.
        string_to_sign: Output of :func:`string_to_sign`.

    Returns:
        ``"AWS <access_key>:<signature>"``.
    """
    return f"{SIGNATURE_SCHEME} {access_key}:{sign(secret_key, string_to_sign)}"
