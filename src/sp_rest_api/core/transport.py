# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Callback-style HTTP transport.

The request layer talks to the network only through a :class:`Transport`:
``perform(request, on_success, on_failure)`` issues one request and later
invokes exactly one of the two continuations. :class:`RequestsTransport` is
the default implementation on top of :class:`~sp_rest_api.core.http.HttpClient`.
"""

from __future__ import annotations

import functools
import logging
from concurrent.futures import Executor, Future
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, Union, runtime_checkable

import requests

from ._error_codes import TRANSPORT_NETWORK, http_error_subcode, is_transient_status
from .errors import HttpError, MalformedResponseError, TransportError
from .http import HttpClient
from .telemetry import NoOpTelemetryManager, TelemetryManager

__all__ = ["TransportRequest", "Transport", "RequestsTransport"]

_logger = logging.getLogger(__name__)


@dataclass
class TransportRequest:
    """A fully prepared HTTP request as handed to the transport.

    :param url: Absolute request URL, query string included.
    :param method: Wire HTTP method (``GET`` or ``POST``).
    :param headers: Request headers.
    :param body: Serialized JSON body, or None.
    :param operation: Logical operation name used for telemetry, e.g. ``"items.delete"``.
    :param list_title: Target list, if any, used for telemetry.
    """

    url: str
    method: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    operation: str = "request"
    list_title: Optional[str] = None


@runtime_checkable
class Transport(Protocol):
    """The only network dependency of the request layer."""

    def perform(
        self,
        request: TransportRequest,
        on_success: Callable[[Any], None],
        on_failure: Callable[[Exception], None],
    ) -> None:
        """Issue ``request``; call ``on_success(decoded_body)`` or ``on_failure(error)`` once."""
        ...


class RequestsTransport:
    """
    :class:`Transport` backed by :class:`HttpClient`.

    Without an executor the request runs in the calling thread and the
    continuation has run by the time :meth:`perform` returns. With an executor,
    :meth:`perform` returns immediately and the request plus its continuation run
    on the executor. Use a single-worker executor to keep continuations strictly
    serialized. An exception escaping a continuation on the executor is logged
    at ERROR on the ``sp_rest_api.core.transport`` logger.

    :param http: HTTP client used to send requests.
    :type http: HttpClient
    :param executor: Optional executor for non-blocking dispatch.
    :type executor: concurrent.futures.Executor or None
    :param telemetry: Telemetry manager notified for every request.
    """

    def __init__(
        self,
        http: HttpClient,
        *,
        executor: Optional[Executor] = None,
        telemetry: Optional[Union[TelemetryManager, NoOpTelemetryManager]] = None,
    ) -> None:
        self._http = http
        self._executor = executor
        self._telemetry = telemetry or NoOpTelemetryManager()

    def perform(
        self,
        request: TransportRequest,
        on_success: Callable[[Any], None],
        on_failure: Callable[[Exception], None],
    ) -> None:
        if self._executor is None:
            self._run(request, on_success, on_failure)
            return
        future = self._executor.submit(self._run, request, on_success, on_failure)
        future.add_done_callback(functools.partial(_log_unhandled, request))

    def close(self) -> None:
        self._http.close()

    def _run(
        self,
        request: TransportRequest,
        on_success: Callable[[Any], None],
        on_failure: Callable[[Exception], None],
    ) -> None:
        ctx = self._telemetry.start_request(request.operation, request.method, request.url, request.list_title)
        headers = {**self._telemetry.get_additional_headers(), **request.headers}
        try:
            response = self._http.request(request.method, request.url, headers=headers, data=request.body)
        except requests.exceptions.RequestException as exc:
            self._telemetry.record_error(ctx, exc)
            error = TransportError(
                f"{request.method} {request.url} failed: {exc}",
                subcode=TRANSPORT_NETWORK,
                details={"url": request.url, "method": request.method},
            )
            error.__cause__ = exc
            on_failure(error)
            return

        self._telemetry.record_response(ctx, response.status_code)
        if response.status_code >= 400:
            on_failure(self._http_error(request, response))
            return

        try:
            payload = self._decode(response)
        except ValueError as exc:
            error = MalformedResponseError(
                f"Response from {request.url} is not valid JSON",
                details={"body_excerpt": (response.text or "")[:200]},
            )
            error.__cause__ = exc
            on_failure(error)
            return
        on_success(payload)

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if not response.text:
            return None
        return response.json()

    @staticmethod
    def _http_error(request: TransportRequest, response: requests.Response) -> HttpError:
        status = response.status_code
        headers = response.headers or {}
        try:
            body = response.json() if response.text else None
        except ValueError:
            body = None

        service_code = None
        message = None
        if isinstance(body, dict):
            err = body.get("error") or body.get("odata.error")
            if isinstance(err, dict):
                service_code = err.get("code")
                msg = err.get("message")
                if isinstance(msg, dict):
                    message = msg.get("value")
                elif isinstance(msg, str):
                    message = msg

        retry_after = None
        ra = headers.get("Retry-After")
        if ra is not None:
            try:
                retry_after = int(ra)
            except (ValueError, TypeError):
                retry_after = None

        summary = message or getattr(response, "reason", None) or "request failed"
        return HttpError(
            f"HTTP {status} for {request.method} {request.url}: {summary}",
            status_code=status,
            is_transient=is_transient_status(status),
            subcode=http_error_subcode(status),
            service_error_code=service_code,
            correlation_id=headers.get("SPRequestGuid"),
            request_id=headers.get("request-id"),
            body_excerpt=(response.text or "")[:200] or None,
            retry_after=retry_after,
            body=body,
        )


def _log_unhandled(request: TransportRequest, future: "Future[None]") -> None:
    """Log an exception that escaped a continuation running on an executor.

    Without a failure continuation the client raises the error from the
    continuation dispatch; on a worker thread that raise ends up here.
    """
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        _logger.error(
            "Unhandled error in continuation of %s %s (%s)",
            request.method,
            request.url,
            request.operation,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
