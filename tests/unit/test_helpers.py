# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared test utilities for unit tests.

Provides scripted transports that record every request handed to them, and
builders for verbose and minimal-metadata collection pages.
"""

from sp_rest_api.core.errors import HttpError


class DummyTransport:
    """Transport that completes synchronously with pre-configured outcomes.

    Args:
        outcomes: List of ``("ok", payload)`` or ``("error", exception)`` tuples,
            consumed in order.

    Attributes:
        requests: Every TransportRequest received, in order.
    """

    def __init__(self, outcomes=None):
        self._outcomes = list(outcomes or [])
        self.requests = []

    def perform(self, request, on_success, on_failure):
        self.requests.append(request)
        if not self._outcomes:
            raise AssertionError("No more dummy outcomes configured")
        kind, payload = self._outcomes.pop(0)
        if kind == "ok":
            on_success(payload)
        else:
            on_failure(payload)


class DeferredTransport:
    """Transport that queues requests until the test completes them explicitly.

    Models a non-blocking host: ``perform`` returns immediately and the
    continuation only runs when ``succeed_next``/``fail_next`` is called.
    """

    def __init__(self):
        self.requests = []
        self._queue = []

    @property
    def pending(self):
        return len(self._queue)

    def perform(self, request, on_success, on_failure):
        self.requests.append(request)
        self._queue.append((request, on_success, on_failure))

    def succeed_next(self, payload):
        _, on_success, _ = self._queue.pop(0)
        on_success(payload)

    def fail_next(self, error):
        _, _, on_failure = self._queue.pop(0)
        on_failure(error)


class Recorder:
    """Collects continuation invocations."""

    def __init__(self):
        self.successes = []
        self.errors = []

    def on_success(self, result):
        self.successes.append(result)

    def on_error(self, error):
        self.errors.append(error)


def verbose_page(items, next_link=None):
    d = {"results": list(items)}
    if next_link:
        d["__next"] = next_link
    return {"d": d}


def minimal_page(items, next_link=None):
    page = {"odata.metadata": "https://contoso.sharepoint.com/_api/$metadata#SP.ListData", "value": list(items)}
    if next_link:
        page["odata.nextLink"] = next_link
    return page


def http_error(status=500, message="Server error"):
    return HttpError(f"HTTP {status}: {message}", status_code=status, subcode=f"http_{status}")
