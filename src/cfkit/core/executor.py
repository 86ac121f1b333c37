from __future__ import annotations

"""
Sends one HTTP request and turns the response into an `Envelope`
or a typed error. No retries happen here.
"""

import dataclasses
import email.utils
import json
import time
import typing as t

import httpx
from pydantic import ValidationError

from ..errors import (
    ApiLogicError,
    ClientError,
    DecodeError,
    RateLimitedError,
    RequestTimeoutError,
    ServerError,
    TransportError,
)
from ..models import ApiError, Envelope
from ..utils.logs import logger
from .cancel import CancelToken
from .serialization import Casing, build_params, get_type_adapter, is_sequence_type, serialize_body

__all__ = ["ApiRequest", "ApiResponse", "RequestExecutor", "parse_retry_after"]

IDEMPOTENT_METHODS = frozenset({'GET', 'HEAD', 'OPTIONS', 'TRACE', 'PUT', 'DELETE'})


@dataclasses.dataclass
class ApiRequest:
    """A request description that can be replayed on retry"""
    method: str
    endpoint: str
    params: t.Optional[t.Dict[str, t.Any]] = None
    body: t.Any = None
    headers: t.Optional[t.Dict[str, str]] = None
    casing: Casing = 'snake'
    timeout: t.Optional[float] = None

    def __post_init__(self):
        self.method = self.method.upper()

    @property
    def is_idempotent(self) -> bool:
        return self.method in IDEMPOTENT_METHODS

    def with_params(self, params: t.Dict[str, t.Any]) -> 'ApiRequest':
        return dataclasses.replace(self, params = params)


@dataclasses.dataclass
class ApiResponse:
    """A successfully parsed envelope with the response details"""
    envelope: Envelope
    status_code: int
    headers: t.Dict[str, str]
    elapsed: float = 0.0


def parse_retry_after(value: t.Optional[str]) -> t.Optional[float]:
    """
    Parses a ``Retry-After`` header given as delta-seconds or an HTTP date
    """
    if not value:
        return None
    value = value.strip()
    try:
        return max(float(value), 0.0)
    except ValueError:
        pass
    try:
        when = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when is None:
        return None
    return max(when.timestamp() - time.time(), 0.0)


def _elapsed(response: httpx.Response) -> float:
    """Seconds the exchange took, or 0.0 when the transport did not time it"""
    try:
        return response.elapsed.total_seconds()
    except RuntimeError:
        return 0.0


def _parse_errors(raw_body: str) -> t.List[ApiError]:
    """Best-effort extraction of envelope errors from a failed response"""
    try:
        data = json.loads(raw_body)
    except ValueError:
        return []
    if not isinstance(data, dict) or not isinstance(data.get('errors'), list):
        return []
    errors = []
    for item in data['errors']:
        try:
            errors.append(ApiError.model_validate(item))
        except ValidationError:
            continue
    return errors


class RequestExecutor:
    """
    Builds the HTTP request, sends it once, and maps the outcome:

    - network failure or timeout -> `TransportError`
    - non-2xx -> `ClientError` / `RateLimitedError` / `ServerError`
    - unparseable body -> `DecodeError`
    - ``success=false`` -> `ApiLogicError`
    """

    def __init__(self, http: 'HttpClient', timeout: t.Optional[float] = None):
        self.http = http
        self.timeout = timeout

    def _build_kwargs(self, request: ApiRequest) -> t.Dict[str, t.Any]:
        kwargs: t.Dict[str, t.Any] = {'params': build_params(request.params)}
        timeout = request.timeout or self.timeout
        if timeout is not None:
            kwargs['timeout'] = timeout
        if request.headers:
            kwargs['headers'] = request.headers
        body = serialize_body(request.body, request.casing)
        if body is not None:
            kwargs['json'] = body
        return kwargs

    def _transport_error(self, request: ApiRequest, exc: httpx.HTTPError) -> TransportError:
        err_cls = RequestTimeoutError if isinstance(exc, httpx.TimeoutException) else TransportError
        logger.error(f'Request failed for {request.method} {request.endpoint}: {exc!r}')
        return err_cls(
            f'{request.method} {request.endpoint} failed: {exc!r}',
            method = request.method,
            url = request.endpoint,
        )

    def _status_error(self, request: ApiRequest, response: httpx.Response) -> TransportError:
        raw_body = response.text
        status = response.status_code
        headers = {k.lower(): v for k, v in response.headers.items()}
        errors = _parse_errors(raw_body)
        msg = f'{request.method} {request.endpoint} returned {status}: {raw_body}'
        logger.warning(
            f'Request failed for {request.method} {request.endpoint} with {status} '
            f'(cf-ray: {headers.get("cf-ray")}, retry-after: {headers.get("retry-after")})'
        )
        kwargs = dict(status_code = status, raw_body = raw_body, errors = errors, method = request.method, url = str(response.url), headers = headers)
        if status == 429:
            return RateLimitedError(msg, retry_after = parse_retry_after(headers.get('retry-after')), **kwargs)
        if status >= 500:
            return ServerError(msg, **kwargs)
        if status >= 400:
            return ClientError(msg, **kwargs)
        # redirects are not followed; anything else outside 2xx is fatal
        return TransportError(msg, **kwargs)

    def process_response(self, request: ApiRequest, response: httpx.Response) -> ApiResponse:
        """Maps an HTTP response to an `ApiResponse` or raises"""
        logger.debug(f'Received {response.status_code} for {request.method} {request.endpoint}')
        if not response.is_success:
            raise self._status_error(request, response)
        raw_body = response.text
        try:
            envelope = Envelope.model_validate_json(raw_body)
        except ValidationError as e:
            logger.error(f'Failed to decode the response for {request.method} {request.endpoint}: {raw_body}')
            raise DecodeError(f'Failed to decode the response for {request.method} {request.endpoint}: {raw_body}', raw_body = raw_body) from e
        if not envelope.success:
            err = ApiLogicError.from_errors(envelope.errors, http_status = response.status_code, raw_body = raw_body)
            logger.warning(f'{request.method} {request.endpoint}: {err.message}')
            raise err
        return ApiResponse(
            envelope = envelope,
            status_code = response.status_code,
            headers = {k.lower(): v for k, v in response.headers.items()},
            elapsed = _elapsed(response),
        )

    def execute(self, request: ApiRequest) -> ApiResponse:
        """Sends ``request`` once"""
        logger.debug(f'Sending {request.method} {request.endpoint}')
        try:
            response = self.http.request(request.method, request.endpoint, **self._build_kwargs(request))
        except httpx.HTTPError as e:
            raise self._transport_error(request, e) from e
        return self.process_response(request, response)

    async def aexecute(self, request: ApiRequest, cancel_token: t.Optional[CancelToken] = None) -> ApiResponse:
        """Async version of execute(); the send races ``cancel_token``"""
        logger.debug(f'Sending {request.method} {request.endpoint}')
        send = self.http.async_request(request.method, request.endpoint, **self._build_kwargs(request))
        try:
            response = await (cancel_token.arun(send) if cancel_token is not None else send)
        except httpx.HTTPError as e:
            raise self._transport_error(request, e) from e
        return self.process_response(request, response)

    @staticmethod
    def decode(envelope: Envelope, result_type: t.Any = t.Any) -> t.Any:
        """
        Validates the envelope's ``result`` into ``result_type``. An absent
        result decodes to ``[]`` for sequence types.
        """
        result = envelope.result
        if result is None:
            return [] if is_sequence_type(result_type) else None
        try:
            return get_type_adapter(result_type).validate_python(result)
        except ValidationError as e:
            raise DecodeError(f'Failed to decode the result as {result_type!r}: {e}', raw_body = json.dumps(result, default = str)) from e


if t.TYPE_CHECKING:
    from .http import HttpClient
