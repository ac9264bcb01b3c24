# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import pytest

from sp_rest_api.core._error_codes import (
    http_error_subcode,
    is_transient_status,
)
from sp_rest_api.core.errors import (
    AuthenticationError,
    HttpError,
    MalformedResponseError,
    SpRestError,
    TokenUnavailableError,
    TransportError,
    ValidationError,
)


@pytest.mark.parametrize(
    "status,expected",
    [(404, "http_404"), (429, "http_429"), (500, "http_500"), (418, "http_418")],
)
def test_http_error_subcode(status, expected):
    assert http_error_subcode(status) == expected


@pytest.mark.parametrize("status", [429, 502, 503, 504])
def test_transient_statuses(status):
    assert is_transient_status(status)


@pytest.mark.parametrize("status", [400, 401, 403, 404, 500])
def test_non_transient_statuses(status):
    assert not is_transient_status(status)


@pytest.mark.parametrize(
    "cls,code,source",
    [
        (ValidationError, "validation_error", "client"),
        (MalformedResponseError, "malformed_response", "server"),
        (TokenUnavailableError, "token_unavailable", "server"),
        (AuthenticationError, "authentication_error", "client"),
    ],
)
def test_leaf_errors_carry_code_and_source(cls, code, source):
    err = cls("boom", subcode="x", details={"k": 1})
    assert isinstance(err, SpRestError)
    assert err.code == code
    assert err.source == source
    assert err.is_transient is False
    assert str(err) == "boom"


def test_transport_error_defaults_transient():
    err = TransportError("connection reset")
    assert err.code == "transport_error"
    assert err.source == "network"
    assert err.is_transient is True
    assert err.status_code is None


def test_http_error_collects_details():
    err = HttpError(
        "HTTP 429",
        status_code=429,
        is_transient=True,
        subcode="http_429",
        service_error_code="throttled",
        correlation_id="guid",
        retry_after=5,
        body={"error": {"code": "throttled"}},
    )
    assert isinstance(err, TransportError)
    assert err.code == "http_error"
    assert err.source == "server"
    assert err.details == {"service_error_code": "throttled", "correlation_id": "guid", "retry_after": 5}
    assert err.body == {"error": {"code": "throttled"}}


def test_to_dict_shape():
    d = ValidationError("bad id", subcode="validation_item_id_invalid").to_dict()
    assert set(d) == {"message", "code", "subcode", "status_code", "details", "source", "is_transient", "timestamp"}
    assert d["message"] == "bad id"
    assert d["details"] == {}
