# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
HTTP client with opt-in retry logic, timeout handling, and optional session support.

This module provides :class:`HttpClient`, a thin wrapper around the requests
library that applies per-method default timeouts and, when enabled, retries
transient network errors and throttling responses with exponential backoff.
Retries are off by default: one attempt per request.
"""

from __future__ import annotations

import random
import time
from typing import Any, Optional

import requests

from ._error_codes import TRANSIENT_STATUS_CODES


class HttpClient:
    """
    HTTP client with configurable retry logic, timeout handling, and optional session support.

    :param retries: Maximum number of attempts per request. Default is 1 (no retry).
    :type retries: int or None
    :param backoff: Base delay in seconds between retry attempts. Default is 0.5.
    :type backoff: float or None
    :param timeout: Default request timeout in seconds. If None, uses per-method defaults.
    :type timeout: float or None
    :param max_backoff: Upper bound for a single retry delay in seconds. Default is 60.0.
    :type max_backoff: float or None
    :param jitter: Whether to add +/-25% random variation to retry delays.
    :type jitter: bool
    :param retry_transient_errors: Whether to retry 429/502/503/504 responses. Default is False.
    :type retry_transient_errors: bool
    :param session: Optional :class:`requests.Session` for connection pooling.
    :type session: requests.Session or None
    """

    def __init__(
        self,
        *,
        retries: Optional[int] = None,
        backoff: Optional[float] = None,
        timeout: Optional[float] = None,
        max_backoff: Optional[float] = None,
        jitter: bool = True,
        retry_transient_errors: bool = False,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.max_attempts = max(1, retries) if retries is not None else 1
        self.base_delay = backoff if backoff is not None else 0.5
        self.max_backoff = max_backoff if max_backoff is not None else 60.0
        self.default_timeout: Optional[float] = timeout
        self.jitter = jitter
        self.retry_transient_errors = retry_transient_errors
        self.transient_status_codes = set(TRANSIENT_STATUS_CODES)
        self._session = session

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Execute an HTTP request with timeout management and opt-in retries.

        Applies default timeouts based on HTTP method (120s for POST, 10s for others).
        SharePoint deletes and merges travel as POST, so they get the longer timeout too.

        :param method: HTTP method (GET, POST).
        :type method: str
        :param url: Target URL for the request.
        :type url: str
        :param kwargs: Additional arguments passed to ``requests.request()`` or
            ``session.request()``, including headers and data.
        :return: HTTP response object.
        :rtype: requests.Response
        :raises requests.exceptions.RequestException: If the last attempt fails at network level.
        """
        if "timeout" not in kwargs:
            if self.default_timeout is not None:
                kwargs["timeout"] = self.default_timeout
            else:
                m = (method or "").lower()
                kwargs["timeout"] = 120 if m in ("post", "delete") else 10

        for attempt in range(self.max_attempts):
            try:
                response = self._send(method, url, **kwargs)

                if (
                    self.retry_transient_errors
                    and response.status_code in self.transient_status_codes
                    and attempt < self.max_attempts - 1
                ):
                    time.sleep(self._calculate_retry_delay(attempt, response))
                    continue

                return response

            except requests.exceptions.RequestException:
                if attempt == self.max_attempts - 1:
                    raise
                time.sleep(self._calculate_retry_delay(attempt))

        raise RuntimeError("Unexpected end of retry loop")

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        if self._session is not None:
            return self._session.request(method, url, **kwargs)
        return requests.request(method, url, **kwargs)

    def _calculate_retry_delay(self, attempt: int, response: Optional[requests.Response] = None) -> float:
        """
        Calculate the delay before the next retry attempt.

        A valid integer ``Retry-After`` header wins (capped at ``max_backoff``);
        otherwise ``base_delay * 2**attempt`` capped at ``max_backoff``, with
        +/-25% jitter when enabled.

        :param attempt: Zero-based retry attempt number.
        :type attempt: int
        :param response: Optional response carrying a ``Retry-After`` header.
        :type response: requests.Response or None
        :return: Delay in seconds, always >= 0.
        :rtype: float
        """
        if response is not None and "Retry-After" in (response.headers or {}):
            try:
                retry_after = int(response.headers["Retry-After"])
                return min(retry_after, self.max_backoff)
            except (ValueError, TypeError):
                pass

        delay = min(self.base_delay * (2**attempt), self.max_backoff)

        if self.jitter:
            jitter_range = delay * 0.25
            delay = max(0, delay + random.uniform(-jitter_range, jitter_range))

        return delay

    def close(self) -> None:
        """
        Close the underlying session, if any. Safe to call multiple times.
        """
        if self._session is not None:
            self._session.close()
            self._session = None
