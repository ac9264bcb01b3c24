# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest
import requests

from sp_rest_api.core._error_codes import TRANSPORT_NETWORK
from sp_rest_api.core.errors import HttpError, MalformedResponseError, TransportError
from sp_rest_api.core.transport import RequestsTransport, Transport, TransportRequest
from tests.unit.test_helpers import Recorder


def make_response(status, body=None, headers=None, reason="OK"):
    r = Mock(spec=requests.Response)
    r.status_code = status
    r.headers = headers or {}
    r.reason = reason
    if body is None:
        r.text = ""
        r.json.side_effect = ValueError("no body")
    elif isinstance(body, (dict, list)):
        r.text = json.dumps(body)
        r.json.return_value = body
    else:
        r.text = body
        r.json.side_effect = ValueError("non-json")
    return r


def make_transport(*responses, **kwargs):
    http = Mock()
    http.request.side_effect = list(responses)
    return RequestsTransport(http, **kwargs), http


REQUEST = TransportRequest(
    url="https://contoso.sharepoint.com/sites/hr/_api/web/lists/getbytitle('Tasks')/items(1)",
    method="POST",
    headers={"X-HTTP-Method": "DELETE", "If-Match": "*"},
    body=None,
    operation="items.delete",
    list_title="Tasks",
)


def test_satisfies_transport_protocol():
    transport, _ = make_transport()
    assert isinstance(transport, Transport)


def test_success_decodes_json():
    transport, http = make_transport(make_response(200, {"d": {"Id": 1}}))
    rec = Recorder()
    transport.perform(REQUEST, rec.on_success, rec.on_error)
    assert rec.successes == [{"d": {"Id": 1}}]
    method, url = http.request.call_args[0]
    assert method == "POST"
    assert url == REQUEST.url
    assert http.request.call_args[1]["headers"]["X-HTTP-Method"] == "DELETE"


def test_empty_body_decodes_to_none():
    transport, _ = make_transport(make_response(204))
    rec = Recorder()
    transport.perform(REQUEST, rec.on_success, rec.on_error)
    assert rec.successes == [None]


def test_invalid_json_reported_as_malformed():
    transport, _ = make_transport(make_response(200, "<html>login</html>"))
    rec = Recorder()
    transport.perform(REQUEST, rec.on_success, rec.on_error)
    assert rec.successes == []
    assert isinstance(rec.errors[0], MalformedResponseError)


def test_verbose_error_body_mapped_to_http_error():
    body = {"error": {"code": "-2130575338, Microsoft.SharePoint.SPException", "message": {"lang": "en-US", "value": "Item does not exist."}}}
    transport, _ = make_transport(make_response(404, body, headers={"SPRequestGuid": "guid-1"}, reason="Not Found"))
    rec = Recorder()
    transport.perform(REQUEST, rec.on_success, rec.on_error)
    err = rec.errors[0]
    assert isinstance(err, HttpError)
    assert isinstance(err, TransportError)
    assert err.status_code == 404
    assert err.subcode == "http_404"
    assert err.is_transient is False
    assert err.details["service_error_code"].startswith("-2130575338")
    assert err.details["correlation_id"] == "guid-1"
    assert "Item does not exist." in err.message
    assert err.body == body


def test_odata_error_body_and_retry_after():
    body = {"odata.error": {"code": "throttled", "message": {"lang": "en-US", "value": "Slow down"}}}
    transport, _ = make_transport(make_response(429, body, headers={"Retry-After": "7"}))
    rec = Recorder()
    transport.perform(REQUEST, rec.on_success, rec.on_error)
    err = rec.errors[0].to_dict()
    assert err["subcode"] == "http_429"
    assert err["is_transient"] is True
    assert err["details"]["retry_after"] == 7
    assert err["details"]["service_error_code"] == "throttled"


def test_non_json_error_body():
    transport, _ = make_transport(make_response(500, "Internal failure", reason="Server Error"))
    rec = Recorder()
    transport.perform(REQUEST, rec.on_success, rec.on_error)
    err = rec.errors[0]
    assert err.status_code == 500
    assert err.details["body_excerpt"] == "Internal failure"
    assert err.body is None


def test_network_error_becomes_transport_error():
    cause = requests.exceptions.ConnectTimeout("timed out")
    transport, _ = make_transport(cause)
    rec = Recorder()
    transport.perform(REQUEST, rec.on_success, rec.on_error)
    err = rec.errors[0]
    assert type(err) is TransportError
    assert err.subcode == TRANSPORT_NETWORK
    assert err.__cause__ is cause


def test_exceptions_from_success_continuation_propagate():
    transport, _ = make_transport(make_response(200, {"value": []}))

    def boom(_):
        raise KeyError("caller bug")

    errors = []
    with pytest.raises(KeyError):
        transport.perform(REQUEST, boom, errors.append)
    assert errors == []


def test_telemetry_headers_merged_and_response_recorded():
    telemetry = Mock()
    telemetry.get_additional_headers.return_value = {"X-Trace": "t1"}
    transport, http = make_transport(make_response(200, {"value": []}), telemetry=telemetry)
    transport.perform(REQUEST, Recorder().on_success, Recorder().on_error)
    assert http.request.call_args[1]["headers"]["X-Trace"] == "t1"
    telemetry.start_request.assert_called_once_with("items.delete", "POST", REQUEST.url, "Tasks")
    telemetry.record_response.assert_called_once()


def test_executor_dispatch_returns_before_completion():
    transport, _ = make_transport(make_response(200, {"value": [1]}))
    rec = Recorder()
    with ThreadPoolExecutor(max_workers=1) as pool:
        transport_async = RequestsTransport(transport._http, executor=pool)
        transport_async.perform(REQUEST, rec.on_success, rec.on_error)
    assert rec.successes == [{"value": [1]}]


def test_executor_logs_error_escaping_failure_continuation(caplog):
    transport, _ = make_transport(requests.exceptions.ConnectionError("reset"))

    def reraise(error):
        raise error

    with caplog.at_level(logging.ERROR, logger="sp_rest_api.core.transport"):
        with ThreadPoolExecutor(max_workers=1) as pool:
            RequestsTransport(transport._http, executor=pool).perform(REQUEST, Recorder().on_success, reraise)

    records = [r for r in caplog.records if r.name == "sp_rest_api.core.transport"]
    assert len(records) == 1
    assert records[0].levelno == logging.ERROR
    assert "items.delete" in records[0].getMessage()
    assert isinstance(records[0].exc_info[1], TransportError)


def test_executor_logs_error_escaping_success_continuation(caplog):
    transport, _ = make_transport(make_response(200, {"value": []}))

    def boom(_):
        raise KeyError("caller bug")

    with caplog.at_level(logging.ERROR, logger="sp_rest_api.core.transport"):
        with ThreadPoolExecutor(max_workers=1) as pool:
            RequestsTransport(transport._http, executor=pool).perform(REQUEST, boom, Recorder().on_error)

    assert [type(r.exc_info[1]) for r in caplog.records if r.name == "sp_rest_api.core.transport"] == [KeyError]


def test_executor_logs_nothing_on_handled_outcome(caplog):
    transport, _ = make_transport(make_response(200, {"value": []}))
    rec = Recorder()
    with caplog.at_level(logging.ERROR, logger="sp_rest_api.core.transport"):
        with ThreadPoolExecutor(max_workers=1) as pool:
            RequestsTransport(transport._http, executor=pool).perform(REQUEST, rec.on_success, rec.on_error)
    assert rec.successes == [{"value": []}]
    assert [r for r in caplog.records if r.name == "sp_rest_api.core.transport"] == []
