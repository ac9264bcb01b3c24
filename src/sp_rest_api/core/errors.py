# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured exception hierarchy for the SharePoint REST list client.

Every error raised or reported by the package derives from :class:`SpRestError`,
which carries a stable ``code``/``subcode`` pair and a ``to_dict()`` view for
logging and diagnostics.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, Optional


class SpRestError(Exception):
    """Base structured error for the SharePoint REST list client."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
        is_transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code
        self.details = details or {}
        self.source = source or "client"
        self.is_transient = is_transient
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "subcode": self.subcode,
            "status_code": self.status_code,
            "details": self.details,
            "source": self.source,
            "is_transient": self.is_transient,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, subcode={self.subcode!r}, message={self.message!r})"


class ValidationError(SpRestError):
    """Caller programming error detected before any request is issued."""

    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="validation_error", subcode=subcode, details=details, source="client")


class MalformedResponseError(SpRestError):
    """Response body does not have the shape expected for the request's verbosity."""

    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="malformed_response", subcode=subcode, details=details, source="server")


class TokenUnavailableError(SpRestError):
    """The context info response carried no request digest in any known shape."""

    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="token_unavailable", subcode=subcode, details=details, source="server")


class AuthenticationError(SpRestError):
    """The configured credential could not produce an access token."""

    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="authentication_error", subcode=subcode, details=details, source="client")


class TransportError(SpRestError):
    """Network-level failure: the request never produced an HTTP response."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "transport_error",
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: str = "network",
        is_transient: bool = True,
    ) -> None:
        super().__init__(
            message,
            code=code,
            subcode=subcode,
            status_code=status_code,
            details=details,
            source=source,
            is_transient=is_transient,
        )


class HttpError(TransportError):
    """The server answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        is_transient: bool = False,
        subcode: Optional[str] = None,
        service_error_code: Optional[str] = None,
        correlation_id: Optional[str] = None,
        request_id: Optional[str] = None,
        body_excerpt: Optional[str] = None,
        retry_after: Optional[int] = None,
        body: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        d = details or {}
        if service_error_code is not None:
            d["service_error_code"] = service_error_code
        if correlation_id is not None:
            d["correlation_id"] = correlation_id
        if request_id is not None:
            d["request_id"] = request_id
        if body_excerpt is not None:
            d["body_excerpt"] = body_excerpt
        if retry_after is not None:
            d["retry_after"] = retry_after
        super().__init__(
            message,
            code="http_error",
            subcode=subcode,
            status_code=status_code,
            details=d,
            source="server",
            is_transient=is_transient,
        )
        # Decoded error payload exactly as the server sent it
        self.body = body


__all__ = [
    "SpRestError",
    "ValidationError",
    "MalformedResponseError",
    "TokenUnavailableError",
    "AuthenticationError",
    "TransportError",
    "HttpError",
]
