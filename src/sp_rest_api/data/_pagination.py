# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Fetch-until-exhausted pagination over a collection URL."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, List, Optional

from ..core.errors import MalformedResponseError
from ._executor import RequestExecutor
from ._normalizer import extract_page, wrap


class FetchState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    ACCUMULATING = "accumulating"
    DONE = "done"
    FAILED = "failed"


class PaginationCoordinator:
    """
    One logical collection fetch.

    Each instance owns its accumulation buffer, so concurrent fetches never share
    state. Pages are requested strictly one after another in next-link order: the
    next request is only issued once the current page's items have been appended.

    In recursive mode the caller receives a single response wrapping every item
    in the shape of one unpaginated page. Otherwise the first page is delivered
    as received. A failure on any page discards the buffer and is reported once;
    nothing is retried.

    .. note::
        Termination depends on the server eventually omitting the next link.
        A server that keeps returning the same link loops forever.

    :param executor: Request executor for this operation.
    :param on_success: Called once with the final response.
    :param on_failure: Called once with the first error.
    :param recursive: Follow next links until exhausted.
    :param operation: Telemetry operation name.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        on_success: Callable[[Any], None],
        on_failure: Callable[[Exception], None],
        *,
        recursive: bool = False,
        operation: str = "items.get_all",
    ) -> None:
        self._executor = executor
        self._verbosity = executor.verbosity
        self._on_success = on_success
        self._on_failure = on_failure
        self._recursive = recursive
        self._operation = operation
        self._buffer: List[Any] = []
        self._pending: Optional[str] = None
        self._issuing = False
        self.state = FetchState.IDLE
        self.pages_fetched = 0

    def fetch(self, url: str) -> "PaginationCoordinator":
        """Start the fetch at ``url`` and return this operation."""
        self._buffer = []
        self.pages_fetched = 0
        self._issue(url)
        return self

    def _issue(self, url: str) -> None:
        # Synchronous transports complete inside execute(); queueing the next
        # link here keeps the call stack flat across any number of pages.
        self._pending = url
        if self._issuing:
            return
        self._issuing = True
        try:
            while self._pending is not None:
                next_url, self._pending = self._pending, None
                self.state = FetchState.FETCHING
                self._executor.execute(next_url, "GET", self._on_page, self._on_error, operation=self._operation)
        finally:
            self._issuing = False

    def _on_page(self, response: Any) -> None:
        self.pages_fetched += 1
        if not self._recursive:
            self.state = FetchState.DONE
            self._on_success(response)
            return

        self.state = FetchState.ACCUMULATING
        try:
            items, next_link = extract_page(response, self._verbosity)
        except MalformedResponseError as exc:
            self._on_error(exc)
            return
        self._buffer.extend(items)

        if next_link:
            self._issue(next_link)
            return

        result = wrap(self._buffer, self._verbosity)
        self._buffer = []
        self.state = FetchState.DONE
        self._on_success(result)

    def _on_error(self, error: Exception) -> None:
        self._buffer = []
        self._pending = None
        self.state = FetchState.FAILED
        self._on_failure(error)
