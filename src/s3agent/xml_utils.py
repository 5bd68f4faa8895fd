"""S3 XML response parsing helpers for s3agent."""

import re
from xml.etree import ElementTree

from s3agent.errors import ParseError
from s3agent.models import ObjectListing, S3ObjectSummary

S3_NS = "{http://s3.amazonaws.com/doc/2006-03-01/}"

LIST_BUCKET_RESULT = "ListBucketResult"

# ASCII decimal digits with an optional minus sign.
_SIZE_RE = re.compile(r"-?[0-9]+")


def _local_name(tag: str) -> str:
    """Strip an ``{namespace}`` prefix from an element tag."""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _find_elem(parent: ElementTree.Element, name: str) -> ElementTree.Element | None:
    """Find a direct child element, trying the S3 namespace first, then bare.

    Uses explicit ``is not None`` checks to avoid ElementTree's deprecated
    truth-value testing of elements.
    """
    elem = parent.find(f"{S3_NS}{name}")
    if elem is not None:
        return elem
    return parent.find(name)


def _iter_elems(parent: ElementTree.Element, name: str) -> list[ElementTree.Element]:
    """Find all descendant elements named ``name``, namespaced or bare."""
    found = parent.findall(f".//{S3_NS}{name}")
    if found:
        return found
    return parent.findall(f".//{name}")


def _child_text(parent: ElementTree.Element, name: str) -> str:
    """Return the text of a direct child, or "" when it is missing or empty."""
    elem = _find_elem(parent, name)
    if elem is None or elem.text is None:
        return ""
    return elem.text


def parse_xml(body: str | bytes) -> ElementTree.Element:
    """Parse an XML document into its root element.

    Args:
        body: The raw XML document.

    Returns:
        The root element.

    Raises:
        ParseError: If the document is not well-formed.
    """
    try:
        return ElementTree.fromstring(body)
    except ElementTree.ParseError as e:
        raise ParseError(f"Malformed XML response: {e}") from e


def parse_list_bucket_result(body: str | bytes) -> ObjectListing:
    """Translate a ListBucketResult document into an ObjectListing.

    The bucket name is the text of the root's ``Name`` child. Every
    ``Contents`` element becomes one S3ObjectSummary built from its ``Key``
    and ``Size`` children, in document order.

    Args:
        body: The raw XML response body.

    Returns:
        The parsed listing.

    Raises:
        ParseError: On malformed XML, an unexpected root element, a
            ``Contents`` entry without ``Key``, or a ``Size`` that is not a
            non-negative integer.
    """
    root = parse_xml(body)
    if _local_name(root.tag) != LIST_BUCKET_RESULT:
        raise ParseError(
            f"Expected {LIST_BUCKET_RESULT} root element, got {_local_name(root.tag)}"
        )

    bucket_name = _child_text(root, "Name")

    entries = []
    for contents in _iter_elems(root, "Contents"):
        key_elem = _find_elem(contents, "Key")
        if key_elem is None:
            raise ParseError("Contents entry without a Key element")
        key = key_elem.text or ""

        size_text = _child_text(contents, "Size").strip()
        if not _SIZE_RE.fullmatch(size_text):
            raise ParseError(f"Invalid Size {size_text!r} for key {key!r}")
        size = int(size_text)
        if size < 0:
            raise ParseError(f"Negative Size {size} for key {key!r}")

        entries.append(S3ObjectSummary(bucket=bucket_name, key=key, size=size))

    is_truncated = _child_text(root, "IsTruncated").strip().lower() == "true"
    return ObjectListing(bucket_name=bucket_name, entries=entries, is_truncated=is_truncated)
