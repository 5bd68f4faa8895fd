"""The StorageAgent façade: put/get/head/list/delete over an injected transport.

Each operation is one round trip: build a signed request, send it through
the transport, translate the response. The agent holds only immutable
state (credentials, region, clock, transport), so one instance can serve
concurrent tasks when the transport and clock allow it.
"""

import logging
import time
from typing import BinaryIO

from s3agent.config import S3AgentConfig
from s3agent.errors import ConfigError, TransportError
from s3agent.logging_config import configure_logging
from s3agent.metrics import init_metrics, record_operation
from s3agent.models import Credentials, ObjectListing, ObjectMetadata, S3Object
from s3agent.request import (
    DEFAULT_CACHE_CONTROL,
    DEFAULT_REGION,
    S3_API_SUFFIX,
    Clock,
    PostData,
    RequestDescriptor,
    build_request,
    list_path,
    path_for_key,
    utc_now,
)
from s3agent.responses import Operation, translate
from s3agent.transport import HttpxTransport, RequestOptions, Transport, TransportResponse

logger = logging.getLogger(__name__)


class StorageAgent:
    """Client for a bucket-style object store using legacy HMAC-SHA1 auth.

    Attributes:
        credentials: The access key pair used to sign every request.
        region: Region label used in virtual hosts (``<bucket>.<region>.<suffix>``).
        api_suffix: Domain suffix of the provider API.
        scheme: URL scheme.
        encode_list_params: Percent-encode list query values.
    """

    def __init__(
        self,
        transport: Transport,
        credentials: Credentials,
        region: str = DEFAULT_REGION,
        clock: Clock = utc_now,
        api_suffix: str = S3_API_SUFFIX,
        scheme: str = "https",
        encode_list_params: bool = False,
    ) -> None:
        """Initialize the agent.

        Args:
            transport: The HTTP collaborator requests are sent through.
            credentials: The access key pair.
            region: Region label for virtual hosts.
            clock: Time source for Date headers.
            api_suffix: Domain suffix of the provider API.
            scheme: URL scheme.
            encode_list_params: Percent-encode list query values instead of
                sending them verbatim.
        """
        self.transport = transport
        self.credentials = credentials
        self.region = region
        self.clock = clock
        self.api_suffix = api_suffix
        self.scheme = scheme
        self.encode_list_params = encode_list_params
        self._owned_transport: HttpxTransport | None = None

    @classmethod
    def from_config(
        cls,
        config: S3AgentConfig,
        transport: Transport | None = None,
        clock: Clock = utc_now,
        apply_logging: bool = False,
    ) -> "StorageAgent":
        """Build an agent from an S3AgentConfig.

        When no transport is given, an HttpxTransport is created from the
        transport section and closed by :meth:`close`. The logging section
        replaces the root handlers, so it is only applied when the caller
        owns the process and passes ``apply_logging=True``.

        Raises:
            ConfigError: If the access or secret key is empty.
        """
        client = config.client
        if not client.access_key or not client.secret_key:
            raise ConfigError("Both access_key and secret_key must be configured.")

        if apply_logging:
            configure_logging(config.logging.level, config.logging.format)

        if config.metrics.enabled:
            init_metrics()

        owned = None
        if transport is None:
            owned = HttpxTransport(
                timeout=config.transport.timeout, verify_tls=config.transport.verify_tls
            )
            transport = owned

        agent = cls(
            transport=transport,
            credentials=Credentials(client.access_key, client.secret_key),
            region=client.region,
            clock=clock,
            api_suffix=client.api_suffix,
            scheme=client.scheme,
            encode_list_params=client.encode_list_params,
        )
        agent._owned_transport = owned
        return agent

    async def close(self) -> None:
        """Close the transport if this agent created it."""
        if self._owned_transport is not None:
            await self._owned_transport.close()

    async def __aenter__(self) -> "StorageAgent":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # -- Operations -----------------------------------------------------------

    async def put(
        self,
        bucket: str,
        key: str,
        content_length: int,
        content: BinaryIO | bytes,
        content_type: str,
        cache_control: str | None = None,
    ) -> None:
        """Store an object.

        Args:
            bucket: The bucket name.
            key: The object key.
            content_length: Declared body length, sent as Content-Length.
            content: The body as a readable stream or bytes.
            content_type: MIME type of the body.
            cache_control: Cache-Control value (default ``no-cache``).

        Raises:
            OperationFailed: If the provider rejects the upload.
            TransportError: If the exchange fails.
        """
        post_data = PostData(
            content=content,
            length=content_length,
            content_type=content_type,
            cache_control=cache_control or DEFAULT_CACHE_CONTROL,
        )
        request = self._build(bucket, path_for_key(key), Operation.PUT, post_data)
        response = await self._execute(request, Operation.PUT, bucket, key)
        translate(response, Operation.PUT, bucket, key)

    async def get(self, bucket: str, key: str) -> S3Object | None:
        """Fetch an object body.

        Returns:
            The object, or None when it is missing or empty. The caller
            owns the returned stream and must close it.
        """
        request = self._build(bucket, path_for_key(key), Operation.GET)
        response = await self._execute(request, Operation.GET, bucket, key)
        return translate(response, Operation.GET, bucket, key)

    async def head(self, bucket: str, key: str) -> ObjectMetadata | None:
        """Fetch object metadata without the body.

        Returns:
            The metadata, or None for any non-2xx response.

        Raises:
            ParseError: If Last-Modified is missing or unparseable.
        """
        request = self._build(bucket, path_for_key(key), Operation.HEAD)
        response = await self._execute(request, Operation.HEAD, bucket, key)
        return translate(response, Operation.HEAD, bucket, key)

    async def list(
        self,
        bucket: str,
        prefix: str | None = None,
        marker: str | None = None,
        delimiter: str | None = None,
        max_keys: int | str | None = None,
    ) -> ObjectListing:
        """List one page of objects in a bucket.

        Truncated results are not followed; pass the last key as ``marker``
        to fetch the next page.

        Raises:
            OperationFailed: On a non-2xx response.
            ParseError: On a malformed listing document.
        """
        path = list_path(
            prefix=prefix,
            marker=marker,
            delimiter=delimiter,
            max_keys=max_keys,
            encode_values=self.encode_list_params,
        )
        request = self._build(bucket, path, Operation.LIST)
        response = await self._execute(request, Operation.LIST, bucket, path)
        return translate(response, Operation.LIST, bucket, path)

    async def delete(self, bucket: str, key: str) -> bool:
        """Delete an object.

        Returns:
            The response's success flag. A missing key may report either
            way depending on the provider.
        """
        request = self._build(bucket, path_for_key(key), Operation.DELETE)
        response = await self._execute(request, Operation.DELETE, bucket, key)
        return translate(response, Operation.DELETE, bucket, key)

    # -- Internals ------------------------------------------------------------

    def _build(
        self,
        bucket: str,
        path: str,
        operation: Operation,
        post_data: PostData | None = None,
    ) -> RequestDescriptor:
        return build_request(
            bucket,
            path,
            self.credentials,
            method=operation.http_method,
            post_data=post_data,
            region=self.region,
            clock=self.clock,
            api_suffix=self.api_suffix,
            scheme=self.scheme,
        )

    async def _execute(
        self,
        request: RequestDescriptor,
        operation: Operation,
        bucket: str,
        key: str,
    ) -> TransportResponse:
        """Send a request through the transport method matching its HTTP method."""
        send = {
            "GET": self.transport.get,
            "PUT": self.transport.put,
            "HEAD": self.transport.head,
            "DELETE": self.transport.delete,
        }[request.method]
        options = RequestOptions(headers=request.headers, body=request.body)
        op_name = operation.value.lower()
        bytes_sent = request.body.length if request.body is not None else 0

        start = time.monotonic()
        try:
            response = await send(request.url, options)
        except TransportError:
            record_operation(op_name, "error", time.monotonic() - start, bytes_sent=bytes_sent)
            raise
        duration = time.monotonic() - start

        record_operation(
            op_name,
            response.status_code,
            duration,
            bytes_sent=bytes_sent,
            bytes_received=len(response.body) if response.body is not None else 0,
        )
        logger.debug(
            "%s %s%s -> %d",
            request.method,
            request.host,
            request.path,
            response.status_code,
            extra={
                "operation": op_name,
                "method": request.method,
                "bucket": bucket,
                "key": key,
                "status": response.status_code,
                "duration_ms": round(duration * 1000, 2),
            },
        )
        return response
