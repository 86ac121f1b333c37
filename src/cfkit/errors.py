from __future__ import annotations

"""Exceptions raised by :mod:`cfkit`."""

import typing as t

if t.TYPE_CHECKING:
    from .models import ApiError


class CloudflareError(Exception):
    """Base class for every error raised by the client"""


class TransportError(CloudflareError):
    """
    Describes a request that failed at the transport level: the connection
    failed, timed out, or the server answered with a non-2xx status
    """

    def __init__(
        self,
        msg: str,
        status_code: t.Optional[int] = None,
        raw_body: t.Optional[str] = None,
        errors: t.Optional[t.List['ApiError']] = None,
        method: t.Optional[str] = None,
        url: t.Optional[str] = None,
        headers: t.Optional[t.Mapping[str, str]] = None,
    ) -> None:
        super().__init__(msg)
        self.message = msg
        self.status_code = status_code
        """The HTTP status, or None when no response was received"""

        self.raw_body = raw_body
        """The raw response body, verbatim"""

        self.errors = errors or []
        """Errors parsed from the response envelope, when it had one"""

        self.method = method
        self.url = url
        self.headers: t.Dict[str, str] = dict(headers or {})
        """The response headers, lower-cased"""

    @property
    def cf_ray(self) -> t.Optional[str]:
        """The ``CF-RAY`` identifier of the failed response"""
        return self.headers.get('cf-ray')


class RequestTimeoutError(TransportError):
    """Describes a request that exceeded its per-request timeout"""


class ClientError(TransportError):
    """Describes a 4xx response other than 429; never retried"""


class RateLimitedError(TransportError):
    """Describes a 429 response"""

    def __init__(self, msg: str, retry_after: t.Optional[float] = None, **kwargs: t.Any) -> None:
        super().__init__(msg, **kwargs)
        self.retry_after = retry_after
        """Seconds the server asked us to wait, when it said"""


class ServerError(TransportError):
    """Describes a 5xx response"""


class ApiLogicError(CloudflareError):
    """Describes a 2xx response whose envelope reported ``success=false``"""

    def __init__(
        self,
        msg: str,
        errors: t.List['ApiError'],
        http_status: int = 200,
        raw_body: t.Optional[str] = None,
    ) -> None:
        super().__init__(msg)
        self.message = msg
        self.errors = errors
        """The envelope's errors, verbatim"""

        self.http_status = http_status
        self.raw_body = raw_body

    @classmethod
    def from_errors(cls, errors: t.List['ApiError'], http_status: int = 200, raw_body: t.Optional[str] = None) -> 'ApiLogicError':
        """Builds the error with a ``[code] message`` summary"""
        summary = '; '.join(f'[{e.code}] {e.message}' for e in errors) or 'no error details returned'
        return cls(f'Cloudflare API returned a failure: {summary}', errors, http_status = http_status, raw_body = raw_body)


class DecodeError(CloudflareError):
    """Describes a response body that could not be decoded"""

    def __init__(self, msg: str, raw_body: t.Optional[str] = None) -> None:
        super().__init__(msg)
        self.message = msg
        self.raw_body = raw_body
        """The raw response body, verbatim"""


class CircuitOpenError(CloudflareError):
    """Describes a call rejected because the circuit breaker is open"""

    def __init__(self, retry_in: float) -> None:
        super().__init__(f'Circuit is open; next probe allowed in {retry_in:.2f}s')
        self.retry_in = retry_in
        """Seconds until a probe call will be allowed"""


class OverloadedError(CloudflareError):
    """Describes a call rejected because the throttle queue is full"""

    def __init__(self, queue_limit: int) -> None:
        super().__init__(f'Rate limiter queue is full ({queue_limit} waiting)')
        self.queue_limit = queue_limit


class RequestCancelledError(CloudflareError):
    """Describes a call stopped because its cancel token fired"""

    def __init__(self, msg: str = 'The request was cancelled') -> None:
        super().__init__(msg)


Overloaded = OverloadedError

RETRYABLE_ERRORS = (RateLimitedError, ServerError)


def is_retryable_error(exc: BaseException) -> bool:
    """
    Returns True for transient failures: 429, 5xx, and transport
    failures that produced no response
    """
    if isinstance(exc, RETRYABLE_ERRORS):
        return True
    return isinstance(exc, TransportError) and exc.status_code is None


def is_not_found(exc: BaseException) -> bool:
    """True for a 404 response"""
    return isinstance(exc, ClientError) and exc.status_code == 404
