# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import functools
from typing import Any, Callable, Dict, Iterable, Optional, Union

import requests

from azure.core.credentials import TokenCredential

from .core._auth import SiteContext, _AuthManager
from .core.config import SpRestConfig
from .core.http import HttpClient
from .core.telemetry import create_telemetry_manager
from .core.transport import RequestsTransport, Transport
from .data._executor import RequestExecutor
from .data._pagination import PaginationCoordinator
from .data._urls import (
    collection_url,
    context_info_url,
    item_url,
    user_url,
    with_filter,
    with_page_limit,
    _require_list_title,
    _site,
)
from .models.options import (
    ErrorCallback,
    Filter,
    ListOptions,
    SuccessCallback,
    build_filter_expression,
)

Key = Union[int, str]


def _discard(result: Any) -> None:
    return None


def _raise(error: Exception) -> None:
    raise error


class SpRestClient:
    """
    Client for SharePoint list items over the REST API.

    Select a list with :meth:`lists`, tune behaviour with :meth:`options`, then
    call the item operations. Every operation is continuation based: it returns
    once the request has been handed to the transport and reports its outcome
    through ``on_success(result)`` or ``on_error(error)``. Per-call continuations
    win over the ones configured in :class:`~sp_rest_api.models.options.ListOptions`.
    Without any failure continuation, errors are raised from the continuation
    dispatch instead of being dropped.

    Argument errors (no list selected, item id ``0`` or empty) raise
    :class:`~sp_rest_api.core.errors.ValidationError` immediately, before any
    request is sent.

    :param site_context: Supplies the default site URL and request digest.
    :type site_context: ~sp_rest_api.core._auth.SiteContext
    :param credential: Optional Azure Identity credential; when given every request
        also carries an ``Authorization: Bearer`` header.
    :type credential: ~azure.core.credentials.TokenCredential or None
    :param config: Transport configuration. Defaults to :meth:`SpRestConfig.from_env`.
    :type config: ~sp_rest_api.core.config.SpRestConfig or None
    :param options: Initial list options.
    :type options: ~sp_rest_api.models.options.ListOptions or None
    :param transport: Custom transport. Defaults to a requests-based transport.
    :type transport: ~sp_rest_api.core.transport.Transport or None

    Example::

        from sp_rest_api import SpRestClient, StaticSiteContext

        ctx = StaticSiteContext("https://contoso.sharepoint.com/sites/hr", token=digest)
        with SpRestClient(ctx) as client:
            client.lists("Project Tasks").options(recursive_fetch=True, max_items=500)
            client.get_all_items(
                on_success=lambda page: print(len(page["d"]["results"])),
                on_error=lambda err: print(err.to_dict()),
            )
    """

    def __init__(
        self,
        site_context: SiteContext,
        *,
        credential: Optional[TokenCredential] = None,
        config: Optional[SpRestConfig] = None,
        options: Optional[ListOptions] = None,
        transport: Optional[Transport] = None,
    ) -> None:
        self._site_context = site_context
        self._config = config or SpRestConfig.from_env()
        self._options = options or ListOptions()
        self.auth = _AuthManager(credential) if credential is not None else None
        self._telemetry = create_telemetry_manager(self._config.telemetry)
        self._transport: Optional[Transport] = transport
        self._owns_transport = transport is None
        self._session: Optional[requests.Session] = None

    def __enter__(self) -> "SpRestClient":
        """
        Enter the context manager, opening a pooled HTTP session for the default transport.
        """
        if self._session is None and self._owns_transport:
            self._session = requests.Session()
            # Rebuild the default transport on top of the session
            self._transport = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """
        Release the HTTP session and the default transport. Safe to call multiple times.
        """
        if self._owns_transport and isinstance(self._transport, RequestsTransport):
            self._transport.close()
            self._transport = None
        if self._session is not None:
            self._session.close()
            self._session = None

    def _get_transport(self) -> Transport:
        if self._transport is None:
            cfg = self._config
            http = HttpClient(
                retries=cfg.http_retries,
                backoff=cfg.http_backoff,
                timeout=cfg.http_timeout,
                max_backoff=cfg.http_max_backoff,
                jitter=cfg.http_jitter if cfg.http_jitter is not None else True,
                retry_transient_errors=bool(cfg.http_retry_transient_errors),
                session=self._session,
            )
            self._transport = RequestsTransport(http, telemetry=self._telemetry)
        return self._transport

    # ---------------- Configuration ----------------

    @property
    def current_options(self) -> ListOptions:
        """The options new operations will be issued with."""
        return self._options

    def lists(self, list_title: str) -> "SpRestClient":
        """
        Select the list subsequent operations target.

        :param list_title: Display name of the list.
        :return: This client, for chaining.
        """
        self._options = self._options.merged(list_title=list_title)
        return self

    def options(self, options: Optional[ListOptions] = None, **changes: Any) -> "SpRestClient":
        """
        Reconfigure the client. Only operations issued afterwards see the change.

        :param options: Replacement options; ``changes`` are applied on top.
        :param changes: Individual :class:`ListOptions` fields, e.g. ``max_items=500``.
        :return: This client, for chaining.
        :raises ValidationError: If the resulting options are invalid.
        """
        base = options if options is not None else self._options
        self._options = base.merged(**changes) if changes else base
        return self

    # ---------------- Internal helpers ----------------

    def _site_url(self, opts: ListOptions) -> str:
        return _site(opts.site_url or self._site_context.site_url)

    def _bearer_token(self, scope: str) -> str:
        # Invoked by RequestExecutor once per request
        return self.auth._acquire_token(scope).access_token

    def _executor(self, opts: ListOptions) -> RequestExecutor:
        token = opts.token if opts.token is not None else self._site_context.token
        bearer_provider: Optional[Callable[[], str]] = None
        if self.auth is not None:
            bearer_provider = functools.partial(self._bearer_token, _AuthManager.scope_for(self._site_url(opts)))
        return RequestExecutor(
            self._get_transport(),
            verbosity=opts.verbosity,
            token=token,
            list_title=opts.list_title,
            bearer_provider=bearer_provider,
        )

    @staticmethod
    def _continuations(
        opts: ListOptions,
        on_success: Optional[SuccessCallback],
        on_error: Optional[ErrorCallback],
    ):
        return (
            on_success or opts.on_success or _discard,
            on_error or opts.on_error or _raise,
        )

    # ---------------- List items ----------------

    def get_all_items(
        self,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        *,
        filters: Optional[Iterable[Filter]] = None,
    ) -> PaginationCoordinator:
        """
        Fetch the items of the selected list.

        The first request carries ``$top=max_items`` and, when present, the AND-ed
        ``$filter``. With ``recursive_fetch`` every next link is followed and
        ``on_success`` receives one response holding all items, shaped like a single
        page for the configured verbosity; otherwise it receives the first page as-is.

        :param filters: Predicates for this call only; defaults to the configured filters.
        :return: The pagination operation, which owns the accumulated items until it completes.
        :raises ValidationError: If no list is selected.
        """
        opts = self._options
        title = _require_list_title(opts.list_title)
        url = with_page_limit(collection_url(self._site_url(opts), title), opts.max_items)
        predicates = opts.filters if filters is None else tuple(filters)
        url = with_filter(url, build_filter_expression(predicates))
        success, error = self._continuations(opts, on_success, on_error)
        coordinator = PaginationCoordinator(
            self._executor(opts),
            success,
            error,
            recursive=opts.recursive_fetch,
            operation="items.get_all",
        )
        return coordinator.fetch(url)

    def get_all_items_in_folder(
        self,
        folder_url: str,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> PaginationCoordinator:
        """
        Fetch the items directly inside a list subfolder.

        Equivalent to :meth:`get_all_items` with :meth:`Filter.in_folder` appended to
        the configured filters.

        :param folder_url: Server-relative URL of the folder.
        """
        predicates = self._options.filters + (Filter.in_folder(folder_url),)
        return self.get_all_items(on_success, on_error, filters=predicates)

    def get_item(
        self,
        item_id: Key,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        """
        Fetch a single item by id.

        :raises ValidationError: If ``item_id`` is zero, empty or not a positive integer.
        """
        opts = self._options
        url = item_url(self._site_url(opts), opts.list_title, item_id)
        success, error = self._continuations(opts, on_success, on_error)
        self._executor(opts).execute(url, "GET", success, error, operation="items.get")

    def create_item(
        self,
        data: Dict[str, Any],
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        """
        Create an item. The entity type metadata is added to ``data`` automatically.

        :param data: Field values keyed by internal field name.
        """
        opts = self._options
        url = collection_url(self._site_url(opts), opts.list_title)
        success, error = self._continuations(opts, on_success, on_error)
        self._executor(opts).execute(url, "POST", success, error, body=data, operation="items.create", typed=True)

    def update_item(
        self,
        item_id: Key,
        changes: Dict[str, Any],
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        """
        Merge ``changes`` into an existing item (sent as ``POST`` + ``X-HTTP-Method: MERGE``).

        :raises ValidationError: If ``item_id`` is zero, empty or not a positive integer.
        """
        opts = self._options
        url = item_url(self._site_url(opts), opts.list_title, item_id)
        success, error = self._continuations(opts, on_success, on_error)
        self._executor(opts).execute(url, "MERGE", success, error, body=changes, operation="items.update", typed=True)

    def delete_item(
        self,
        item_id: Key,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        """
        Delete an item (sent as ``POST`` + ``X-HTTP-Method: DELETE``).

        :raises ValidationError: If ``item_id`` is zero, empty or not a positive integer.
        """
        opts = self._options
        url = item_url(self._site_url(opts), opts.list_title, item_id)
        success, error = self._continuations(opts, on_success, on_error)
        self._executor(opts).execute(url, "DELETE", success, error, operation="items.delete")

    # ---------------- Site ----------------

    def get_user(
        self,
        user_id: Key,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        """
        Fetch a site user with its groups expanded.

        :raises ValidationError: If ``user_id`` is zero, empty or not a positive integer.
        """
        opts = self._options
        url = user_url(self._site_url(opts), user_id)
        success, error = self._continuations(opts, on_success, on_error)
        self._executor(opts).execute(url, "GET", success, error, operation="users.get")

    def refresh_token(
        self,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        """
        Request a new request digest and store it in the client options.

        Requests already in flight keep the digest they were sent with.
        ``on_success`` receives the new digest string.
        """
        opts = self._options
        url = context_info_url(self._site_url(opts))
        success, error = self._continuations(opts, on_success, on_error)

        def _store(digest: str) -> None:
            self._options = self._options.merged(token=digest)
            success(digest)

        self._executor(opts).refresh_token(url, _store, error)

    def load_url(
        self,
        url: str,
        method: str = "GET",
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Call any REST URL with the client's headers. Usually there is no need to
        call this directly.
        """
        opts = self._options
        success, error = self._continuations(opts, on_success, on_error)
        self._executor(opts).execute(url, method, success, error, body=body, operation="request")
