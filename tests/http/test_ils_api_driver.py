from __future__ import annotations

import logging

import httpx
import pytest

from recordloader.domain.exceptions import BadConfigError, RecordMissingError
from recordloader.infra.http.ils_api_client import (
    ApiError,
    BadRequestError,
    ForbiddenError,
    IlsApiDriver,
    IlsError,
)

CONFIG = {"API": {"base_url": "https://ils.local/api/"}}


def make_driver(responder, **kwargs) -> IlsApiDriver:
    return IlsApiDriver(
        config=CONFIG,
        retryBackoffSeconds=0,
        transport=httpx.MockTransport(responder),
        **kwargs,
    )


def test_set_config_requires_base_url():
    with pytest.raises(BadConfigError, match="API Driver configured without base url."):
        IlsApiDriver(config={"API": {}})
    with pytest.raises(BadConfigError):
        IlsApiDriver(config={})


def test_make_request_without_config_fails():
    driver = IlsApiDriver(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    with pytest.raises(BadConfigError):
        driver.makeRequest("GET", "/patron")


def test_get_params_go_to_query_string():
    def responder(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/api/patron"
        assert request.url.params["barcode"] == "123"
        assert request.headers["X-Extra"] == "1"
        return httpx.Response(200, json={"ok": True})

    driver = make_driver(responder)

    response = driver.makeRequest("GET", "/patron", {"barcode": "123"}, {"X-Extra": "1"})

    assert response.json() == {"ok": True}


def test_post_mapping_sent_as_form_and_string_as_raw_body():
    seen = []

    def responder(request: httpx.Request) -> httpx.Response:
        seen.append(request.content.decode("utf-8"))
        return httpx.Response(201)

    driver = make_driver(responder)

    driver.makeRequest("POST", "/hold", {"item": "i1"})
    driver.makeRequest("PUT", "/hold", '{"item": "i2"}')

    assert seen == ["item=i1", '{"item": "i2"}']


def test_pre_request_hook_adds_defaults():
    class TokenDriver(IlsApiDriver):
        def preRequest(self, headers, params):
            headers["Authorization"] = "Bearer t"
            params = dict(params)
            params["format"] = "json"
            return headers, params

    def responder(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer t"
        assert request.url.params["format"] == "json"
        return httpx.Response(200, json=[])

    driver = TokenDriver(config=CONFIG, transport=httpx.MockTransport(responder))

    assert driver.getJson("/items") == []


@pytest.mark.parametrize(
    "status, error_type",
    [
        (400, BadRequestError),
        (401, ForbiddenError),
        (403, ForbiddenError),
        (404, RecordMissingError),
        (500, IlsError),
    ],
)
def test_status_codes_map_to_errors(status, error_type):
    driver = make_driver(lambda request: httpx.Response(status, text="body text"))

    with pytest.raises(error_type) as exc:
        driver.makeRequest("GET", "/x")

    if status == 500:
        assert str(exc.value) == "500: Internal Server Error"
    else:
        assert str(exc.value) == "body text"


def test_other_statuses_are_returned_untouched():
    driver = make_driver(lambda request: httpx.Response(503, text="busy"))

    response = driver.makeRequest("GET", "/x")

    assert response.status_code == 503


def test_network_error_retried_then_raised():
    calls = {"count": 0}

    def responder(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        raise httpx.ConnectError("boom")

    driver = make_driver(responder, retries=2)

    with pytest.raises(ApiError) as exc:
        driver.makeRequest("GET", "/x")

    assert exc.value.code == "NETWORK_ERROR"
    assert calls["count"] == 3
    assert driver.getRetryAttempts() == 2


def test_invalid_json():
    driver = make_driver(lambda request: httpx.Response(200, text="not-json"))

    with pytest.raises(ApiError) as exc:
        driver.getJson("/x")

    assert exc.value.code == "INVALID_JSON"
    assert not exc.value.retryable


def test_debug_request_masks_secrets_and_hides_non_get_params(caplog):
    logger = logging.getLogger("test.ils.debug")
    logger.setLevel(logging.DEBUG)
    driver = make_driver(lambda request: httpx.Response(200, json={}), logger=logger, runId="r1")

    with caplog.at_level(logging.DEBUG, logger="test.ils.debug"):
        driver.makeRequest("GET", "/x", {"api_key": "s3cret", "q": "a"})
        driver.makeRequest("POST", "/y", {"password": "pw"})

    messages = [r.getMessage() for r in caplog.records]
    assert any("GET request. URL: /x." in m and "'***'" in m for m in messages)
    assert all("s3cret" not in m and "pw'" not in m for m in messages)
    assert any("POST request. URL: /y. Params: {}." in m for m in messages)
