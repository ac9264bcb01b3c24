# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Single-request execution: headers, method override, body metadata, request digest refresh."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Optional

from ..common.constants import (
    CONTEXT_INFO_VERBOSE_KEY,
    FORM_DIGEST_VALUE,
    HEADER_ACCEPT,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_TYPE,
    HEADER_HTTP_METHOD,
    HEADER_IF_MATCH,
    HEADER_REQUEST_DIGEST,
    ODATA_TYPE,
    VERBOSE_ENVELOPE,
    VERBOSE_METADATA,
)
from ..core._error_codes import AUTH_TOKEN_ACQUISITION_FAILED, TOKEN_DIGEST_MISSING, VALIDATION_BODY_NOT_DICT
from ..core.errors import AuthenticationError, TokenUnavailableError, ValidationError
from ..core.transport import Transport, TransportRequest
from ..models.options import Verbosity
from ._naming import to_list_item_type_name

# Verbs the server only accepts tunnelled through POST
_OVERRIDDEN_METHODS = frozenset({"DELETE", "MERGE"})
_METHOD_ALIASES = {"UPDATE": "MERGE", "PATCH": "MERGE"}


class RequestExecutor:
    """
    Issues one request at a time with the headers SharePoint requires.

    An executor is a snapshot of the request-shaping state (verbosity, digest,
    target list) taken when an operation starts; reconfiguring the client does
    not affect executors already handed to in-flight operations.

    :param transport: Network collaborator.
    :param verbosity: Metadata level used for ``Accept`` and ``Content-Type``.
    :param token: Request digest sent as ``X-RequestDigest``.
    :param list_title: Target list, used to type create/update bodies.
    :param bearer_token: Optional Azure AD access token.
    :param bearer_provider: Optional callable returning an Azure AD access token, called
        for every request. A failure inside it is reported as
        :class:`~sp_rest_api.core.errors.AuthenticationError` through ``on_failure``.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        verbosity: Verbosity,
        token: str = "",
        list_title: Optional[str] = None,
        bearer_token: Optional[str] = None,
        bearer_provider: Optional[Callable[[], str]] = None,
    ) -> None:
        self._transport = transport
        self.verbosity = verbosity
        self.token = token or ""
        self.list_title = list_title or None
        self._bearer_token = bearer_token
        self._bearer_provider = bearer_provider

    def _bearer(self) -> Optional[str]:
        if self._bearer_provider is not None:
            return self._bearer_provider()
        return self._bearer_token

    def _headers(self, bearer: Optional[str]) -> Dict[str, str]:
        headers = {
            HEADER_ACCEPT: self.verbosity.media_type,
            HEADER_CONTENT_TYPE: self.verbosity.media_type,
            HEADER_REQUEST_DIGEST: self.token,
        }
        if bearer:
            headers[HEADER_AUTHORIZATION] = f"Bearer {bearer}"
        return headers

    def _with_type_metadata(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """Stamp the list item entity type into a create/update body (caller's dict is not mutated)."""
        if not self.list_title:
            return body
        type_name = to_list_item_type_name(self.list_title)
        if self.verbosity is Verbosity.VERBOSE:
            if VERBOSE_METADATA in body:
                return body
            return {VERBOSE_METADATA: {"type": type_name}, **body}
        if ODATA_TYPE in body:
            return body
        return {ODATA_TYPE: type_name, **body}

    def execute(
        self,
        url: str,
        method: str,
        on_success: Callable[[Any], None],
        on_failure: Callable[[Exception], None],
        body: Optional[Dict[str, Any]] = None,
        *,
        operation: str = "request",
        typed: bool = False,
    ) -> None:
        """
        Send one request. Every failure, including body serialization errors, is
        reported through ``on_failure``; nothing is raised past this call.

        ``DELETE`` and ``MERGE`` (alias ``UPDATE``/``PATCH``) are sent as ``POST``
        with ``X-HTTP-Method`` carrying the logical verb and ``If-Match: *``.
        With ``typed`` (list item create and update only) the list item entity type
        is added to the body.
        """
        verb = (method or "GET").upper()
        verb = _METHOD_ALIASES.get(verb, verb)
        try:
            bearer = self._bearer()
        except Exception as exc:
            error = AuthenticationError(
                f"Could not acquire an access token: {exc}",
                subcode=AUTH_TOKEN_ACQUISITION_FAILED,
            )
            error.__cause__ = exc
            on_failure(error)
            return
        headers = self._headers(bearer)
        wire_method = verb
        if verb in _OVERRIDDEN_METHODS:
            wire_method = "POST"
            headers[HEADER_HTTP_METHOD] = verb
            headers[HEADER_IF_MATCH] = "*"

        data: Optional[str] = None
        if body is not None:
            try:
                if not isinstance(body, dict):
                    raise ValidationError(
                        f"Request body must be a dict, got {type(body).__name__}",
                        subcode=VALIDATION_BODY_NOT_DICT,
                    )
                if typed:
                    body = self._with_type_metadata(body)
                data = json.dumps(body)
            except (TypeError, ValueError, ValidationError) as exc:
                error = exc if isinstance(exc, ValidationError) else ValidationError(
                    f"Request body is not JSON serializable: {exc}",
                    subcode=VALIDATION_BODY_NOT_DICT,
                )
                on_failure(error)
                return

        request = TransportRequest(
            url=url,
            method=wire_method,
            headers=headers,
            body=data,
            operation=operation,
            list_title=self.list_title,
        )
        self._transport.perform(request, on_success, on_failure)

    def refresh_token(
        self,
        context_info_url: str,
        on_complete: Callable[[str], None],
        on_failure: Callable[[Exception], None],
    ) -> None:
        """
        Fetch a fresh request digest from the context info endpoint.

        The verbose shape (``d.GetContextWebInformation.FormDigestValue``) is probed
        first, then the flat shape (``FormDigestValue``), whatever this executor's
        verbosity. On success the digest is stored on the executor and passed to
        ``on_complete``; a response carrying neither shape reports
        :class:`TokenUnavailableError` to ``on_failure``.
        """

        def _on_success(response: Any) -> None:
            digest = extract_form_digest(response)
            if digest is None:
                on_failure(
                    TokenUnavailableError(
                        "Context info response carries no FormDigestValue",
                        subcode=TOKEN_DIGEST_MISSING,
                    )
                )
                return
            self.token = digest
            on_complete(digest)

        self.execute(context_info_url, "POST", _on_success, on_failure, operation="contextinfo")


def extract_form_digest(response: Any) -> Optional[str]:
    if not isinstance(response, dict):
        return None
    envelope = response.get(VERBOSE_ENVELOPE)
    if isinstance(envelope, dict):
        info = envelope.get(CONTEXT_INFO_VERBOSE_KEY)
        if isinstance(info, dict) and isinstance(info.get(FORM_DIGEST_VALUE), str):
            return info[FORM_DIGEST_VALUE]
    digest = response.get(FORM_DIGEST_VALUE)
    if isinstance(digest, str):
        return digest
    return None
