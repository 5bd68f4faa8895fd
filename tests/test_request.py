"""Tests for request construction: addressing, dates and header assembly."""

import io
from datetime import datetime, timedelta, timezone

from s3agent.auth import authorization_header, string_to_sign
from s3agent.models import Credentials
from s3agent.request import (
    PostData,
    RequestDescriptor,
    build_request,
    format_date,
    list_path,
    path_for_key,
    virtual_host_for_bucket,
)

from .conftest import ACCESS_KEY, FIXED_DATE, FIXED_INSTANT, SECRET_KEY, fixed_clock


class TestAddressing:
    """Tests for virtual_host_for_bucket() and path_for_key()."""

    def test_virtual_host(self):
        assert virtual_host_for_bucket("bucket", "us-east") == "bucket.us-east.amazonaws.com"

    def test_virtual_host_default_region(self):
        assert virtual_host_for_bucket("foo") == "foo.s3.amazonaws.com"

    def test_virtual_host_custom_suffix(self):
        assert virtual_host_for_bucket("foo", "r1", "example.net") == "foo.r1.example.net"

    def test_path_for_simple_key(self):
        assert path_for_key("photo.jpg") == "/photo.jpg"

    def test_path_encodes_slashes(self):
        assert path_for_key("a/b") == "/a%2Fb"

    def test_path_encodes_spaces_and_reserved(self):
        assert path_for_key("my file&x=1.txt") == "/my%20file%26x%3D1.txt"

    def test_path_encodes_utf8(self):
        assert path_for_key("café") == "/caf%C3%A9"

    def test_leading_slash_quirk(self):
        """A key starting with '/' is encoded as-is, with no root slash added."""
        rooted = path_for_key("/a/b")
        relative = path_for_key("a/b")
        assert rooted == "%2Fa%2Fb"
        assert relative == "/a%2Fb"
        assert rooted[len("%2F"):] == relative[len("/"):]


class TestListPath:
    """Tests for list_path()."""

    def test_no_params(self):
        assert list_path() == "/?"

    def test_fixed_order(self):
        """Parameters render as prefix, marker, delimiter, max-keys."""
        path = list_path(max_keys=5, delimiter="/", marker="m", prefix="p")
        assert path == "/?prefix=p&marker=m&delimiter=/&max-keys=5"

    def test_only_supplied_params(self):
        assert list_path(prefix="photos/", max_keys="100") == "/?prefix=photos/&max-keys=100"

    def test_values_not_encoded_by_default(self):
        assert list_path(prefix="a b&c") == "/?prefix=a b&c"

    def test_values_encoded_on_request(self):
        assert list_path(prefix="a b&c", encode_values=True) == "/?prefix=a%20b%26c"

    def test_empty_string_is_supplied(self):
        assert list_path(prefix="") == "/?prefix="


class TestFormatDate:
    """Tests for format_date()."""

    def test_utc_instant(self):
        assert format_date(FIXED_INSTANT) == FIXED_DATE

    def test_converts_to_utc(self):
        eastern = timezone(timedelta(hours=-4))
        moment = datetime(2015, 10, 21, 3, 28, 0, tzinfo=eastern)
        assert format_date(moment) == FIXED_DATE

    def test_naive_taken_as_utc(self):
        assert format_date(datetime(2015, 10, 21, 7, 28, 0)) == FIXED_DATE

    def test_drops_microseconds(self):
        assert format_date(FIXED_INSTANT.replace(microsecond=999999)) == FIXED_DATE

    def test_zero_padded_day(self):
        moment = datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
        assert format_date(moment) == "Mon, 01 Jan 2024 00:00:00 +0000"


class TestBuildRequest:
    """Tests for build_request()."""

    def _credentials(self):
        return Credentials(ACCESS_KEY, SECRET_KEY)

    def test_get_request(self):
        req = build_request("mybucket", "/a%2Fb", self._credentials(), clock=fixed_clock)
        assert req.host == "mybucket.s3.amazonaws.com"
        assert req.path == "/a%2Fb"
        assert req.method == "GET"
        assert req.url == "https://mybucket.s3.amazonaws.com/a%2Fb"
        assert req.body is None

    def test_header_order_without_body(self):
        req = build_request("mybucket", "/key", self._credentials(), clock=fixed_clock)
        assert [name for name, _ in req.headers] == ["Authorization", "Host", "Date"]
        assert req.header("Host") == "mybucket.s3.amazonaws.com"
        assert req.header("Date") == FIXED_DATE

    def test_authorization_signs_canonical_resource(self):
        req = build_request("mybucket", "/key", self._credentials(), "DELETE", clock=fixed_clock)
        sts = string_to_sign("DELETE", FIXED_DATE, "/mybucket/key")
        assert req.header("Authorization") == authorization_header(ACCESS_KEY, SECRET_KEY, sts)

    def test_query_not_signed(self):
        """The list query string stays out of the canonical resource."""
        path = "/?prefix=a&max-keys=2"
        req = build_request("mybucket", path, self._credentials(), clock=fixed_clock)
        sts = string_to_sign("GET", FIXED_DATE, "/mybucket/")
        assert req.header("Authorization") == authorization_header(ACCESS_KEY, SECRET_KEY, sts)
        assert req.url == "https://mybucket.s3.amazonaws.com/?prefix=a&max-keys=2"

    def test_put_headers(self):
        body = PostData(io.BytesIO(b"hello"), 5, "text/plain")
        req = build_request(
            "mybucket", "/greeting.txt", self._credentials(), "PUT", body, clock=fixed_clock
        )
        assert [name for name, _ in req.headers] == [
            "Authorization",
            "Host",
            "Date",
            "Content-Length",
            "Content-Type",
            "Cache-Control",
        ]
        assert req.header("Content-Length") == "5"
        assert req.header("Content-Type") == "text/plain"
        assert req.header("Cache-Control") == "no-cache"
        assert req.body is body

    def test_put_signs_content_type(self):
        body = PostData(b"x", 1, "image/png")
        req = build_request("b", "/k", self._credentials(), "PUT", body, clock=fixed_clock)
        sts = string_to_sign("PUT", FIXED_DATE, "/b/k", "", "image/png")
        assert req.header("Authorization") == authorization_header(ACCESS_KEY, SECRET_KEY, sts)

    def test_declared_length_trusted(self):
        """Content-Length is the declared length, not the measured one."""
        body = PostData(b"abc", 42, "application/octet-stream", "max-age=60")
        req = build_request("b", "/k", self._credentials(), "PUT", body, clock=fixed_clock)
        assert req.header("Content-Length") == "42"
        assert req.header("Cache-Control") == "max-age=60"

    def test_region_in_host(self):
        req = build_request("b", "/k", self._credentials(), region="us-west-2", clock=fixed_clock)
        assert req.host == "b.us-west-2.amazonaws.com"

    def test_deterministic_with_fixed_clock(self):
        first = build_request("b", "/k", self._credentials(), clock=fixed_clock)
        second = build_request("b", "/k", self._credentials(), clock=fixed_clock)
        assert first.headers == second.headers

    def test_clock_drives_date(self):
        later = FIXED_INSTANT + timedelta(seconds=1)
        req = build_request("b", "/k", self._credentials(), clock=lambda: later)
        assert req.header("Date") == "Wed, 21 Oct 2015 07:28:01 +0000"

    def test_secret_never_in_headers(self):
        body = PostData(b"x", 1, "text/plain")
        req = build_request("b", "/k", self._credentials(), "PUT", body, clock=fixed_clock)
        for _, value in req.headers:
            assert SECRET_KEY not in value

    def test_header_lookup_case_insensitive(self):
        req = RequestDescriptor(host="h", path="/", headers=[("Content-Type", "a/b")])
        assert req.header("content-type") == "a/b"
        assert req.header("X-Missing") is None
