from __future__ import annotations

import httpx
import pytest

from recordloader.infra.fallback.api_loader import ApiFallbackLoader
from recordloader.infra.http.ils_api_client import ApiError, IlsError
from recordloader.infra.http.record_api_driver import RecordApiDriver
from recordloader.infra.search.api_backend import ApiSearchBackend
from recordloader.infra.search.service import SearchBackendRegistry, SearchService
from recordloader.records.factory import RecordFactory


def make_driver(responder, **api) -> RecordApiDriver:
    config = {"API": {"base_url": "https://index.local", **api}}
    return RecordApiDriver(config=config, transport=httpx.MockTransport(responder))


def test_get_record_uses_record_path_and_params():
    def responder(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/record"
        assert request.url.params["id"] == "r1"
        assert request.url.params["fl"] == "title"
        return httpx.Response(200, json={"records": [{"id": "r1", "title": "T"}]})

    driver = make_driver(responder)

    assert driver.getRecord("r1", {"fl": "title"}) == [{"id": "r1", "title": "T"}]


def test_get_records_uses_batch_path_and_repeated_ids():
    def responder(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v2/search/records"
        assert request.url.params.get_list("id[]") == ["a", "b"]
        return httpx.Response(200, json=[{"id": "b"}, {"id": "a"}])

    driver = make_driver(responder, batch_path="/v2/search/records")

    assert [item["id"] for item in driver.getRecords(["a", "b"])] == ["b", "a"]


def test_unexpected_payload_shape():
    driver = make_driver(lambda request: httpx.Response(200, json={"status": "ok"}))

    with pytest.raises(ApiError) as exc:
        driver.getRecords(["a"])

    assert exc.value.code == "INVALID_ITEMS_FORMAT"


def test_backend_builds_records_with_source():
    driver = make_driver(lambda request: httpx.Response(200, json={"items": [{"id": 7, "title": "Seven"}]}))
    backend = ApiSearchBackend("Solr", driver, RecordFactory())

    collection = backend.retrieve_batch(["7"])

    assert len(collection) == 1
    record = collection.get_records()[0]
    assert record.get_unique_id() == "7"
    assert record.get_source_identifier() == "Solr"
    assert record.get_title() == "Seven"


def test_backend_treats_404_as_empty_collection():
    driver = make_driver(lambda request: httpx.Response(404, text="not found"))
    backend = ApiSearchBackend("Solr", driver, RecordFactory())

    assert len(backend.retrieve("nope")) == 0


def test_backend_propagates_server_errors():
    driver = make_driver(lambda request: httpx.Response(500))
    backend = ApiSearchBackend("Solr", driver, RecordFactory())

    with pytest.raises(IlsError):
        backend.retrieve("x")


def test_search_service_routes_by_source():
    solr = ApiSearchBackend(
        "Solr",
        make_driver(lambda request: httpx.Response(200, json=[{"id": "s"}])),
        RecordFactory(),
    )
    registry = SearchBackendRegistry()
    registry.register(solr)
    service = SearchService(registry)

    assert service.retrieve("Solr", "s").get_records()[0].get_source_identifier() == "Solr"
    with pytest.raises(ValueError, match="Unsupported search backend: Summon"):
        service.retrieve_batch("Summon", ["x"])


def test_fallback_loader_stamps_fallback_source():
    driver = make_driver(lambda request: httpx.Response(200, json={"data": [{"id": "t3"}]}))
    loader = ApiFallbackLoader("Summon", driver, RecordFactory())

    records = loader.load(["t3"])

    assert [(r.get_source_identifier(), r.get_unique_id()) for r in records] == [("Summon", "t3")]
    assert loader.load([]) == []


def test_backend_treats_batch_404_as_empty_collection():
    def responder(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/records"
        return httpx.Response(404, text="Not Found")

    backend = ApiSearchBackend("Solr", make_driver(responder), RecordFactory())

    assert len(backend.retrieve_batch(["a", "b"])) == 0


def test_fallback_loader_treats_404_as_nothing_found():
    driver = make_driver(lambda request: httpx.Response(404, text="Not Found"))
    loader = ApiFallbackLoader("Solr", driver, RecordFactory())

    assert loader.load(["a", "b"]) == []
