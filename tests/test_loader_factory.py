from __future__ import annotations

import httpx
import pytest

from recordloader.config import Settings
from recordloader.domain.exceptions import BadConfigError, RecordMissingError
from recordloader.factory import LoaderFactory


def responder(request: httpx.Request) -> httpx.Response:
    host = request.url.host
    if host == "solr.local":
        ids = request.url.params.get_list("id[]") or [request.url.params.get("id")]
        return httpx.Response(200, json=[{"id": i, "title": f"solr {i}"} for i in ids if i != "gone"])
    if host == "summon.local":
        return httpx.Response(200, json={"records": [{"id": "gone", "title": "from summon"}]})
    return httpx.Response(500)


def make_settings(**overrides) -> Settings:
    data = {
        "backends": {"Solr": {"API": {"base_url": "https://solr.local"}}},
        "fallbacks": {"Solr": {"API": {"base_url": "https://summon.local"}}},
    }
    data.update(overrides)
    return Settings(**data)


def test_loader_wired_from_settings():
    factory = LoaderFactory(make_settings(), transport=httpx.MockTransport(responder))
    loader = factory.create_record_loader()

    records = loader.load_batch(["Solr|a", "gone", "a"])

    assert [r.get_unique_id() for r in records] == ["a", "gone", "a"]
    assert records[1].get_title() == "from summon"
    assert records[0] is records[2]


def test_no_fallbacks_means_no_registry():
    factory = LoaderFactory(make_settings(fallbacks={}), transport=httpx.MockTransport(responder))

    assert factory.create_record_loader().fallback_registry is None


def test_bad_driver_config_names_source():
    factory = LoaderFactory(make_settings(backends={"Solr": {"API": {}}}))

    with pytest.raises(BadConfigError) as exc:
        factory.create_search_service()

    assert str(exc.value) == "Solr: API Driver configured without base url."
    assert exc.value.details == {"source": "Solr"}


def not_found(request: httpx.Request) -> httpx.Response:
    return httpx.Response(404, text="Not Found")


def test_tolerant_batch_gets_placeholders_when_endpoint_answers_404():
    factory = LoaderFactory(make_settings(fallbacks={}), transport=httpx.MockTransport(not_found))

    records = factory.create_record_loader().load_batch(["Solr|a", "Solr|b"], tolerate_missing=True)

    assert [(r.get_unique_id(), r.is_missing()) for r in records] == [("a", True), ("b", True)]


def test_fallback_404_reports_first_unresolved_record():
    factory = LoaderFactory(make_settings(), transport=httpx.MockTransport(not_found))

    with pytest.raises(RecordMissingError) as exc:
        factory.create_record_loader().load_batch(["Solr|a", "Solr|b"])

    assert str(exc.value) == "Record Solr:a does not exist."
