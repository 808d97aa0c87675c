from __future__ import annotations

import json

import httpx
import pytest
from httpx import Response

from storefront.services.catalog import (
    CatalogFetchError,
    HttpCatalogStore,
    InMemoryCatalogStore,
    extract_brand_names,
    extract_documents,
)


def test_in_memory_store_orders_by_quality_score_and_limits():
    store = InMemoryCatalogStore(
        products=[
            {"id": "low", "score": 10},
            {"id": "high", "score": 90},
            {"id": "mid", "score": "50"},
            {"id": "none"},
        ]
    )

    records = store.fetch_top_products(3)

    assert [record["id"] for record in records] == ["high", "mid", "low"]


def test_in_memory_store_returns_only_known_brands():
    store = InMemoryCatalogStore(brands={"b-1": "Inoar", "b-2": "COSRX"})

    assert store.fetch_brand_names({"b-1", "b-404"}) == {"b-1": "Inoar"}


def test_in_memory_store_reads_export_file(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps(
            {
                "brands": {"b-1": "Inoar"},
                "products": [{"id": "p-1", "score": 1}, {"id": "p-2", "score": 2}],
            }
        ),
        encoding="utf-8",
    )
    store = InMemoryCatalogStore.from_file(path)

    assert [record["id"] for record in store.fetch_top_products(10)] == ["p-2", "p-1"]
    assert store.fetch_brand_names({"b-1"}) == {"b-1": "Inoar"}


def test_in_memory_store_accepts_bare_product_list(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps([{"id": "p-1", "name": "Masque"}]), encoding="utf-8")
    store = InMemoryCatalogStore.from_file(path)

    assert store.fetch_top_products(5) == [{"id": "p-1", "name": "Masque"}]
    assert store.fetch_brand_names({"p-1"}) == {}


def test_in_memory_store_missing_file_is_a_fetch_error(tmp_path):
    store = InMemoryCatalogStore.from_file(tmp_path / "missing.json")

    with pytest.raises(CatalogFetchError):
        store.fetch_top_products(5)


def test_in_memory_store_corrupt_file_is_a_fetch_error(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(CatalogFetchError):
        InMemoryCatalogStore.from_file(path).fetch_top_products(5)


@pytest.mark.parametrize(
    ("payload", "expected_ids"),
    [
        ([{"id": "a"}, {"id": "b"}], ["a", "b"]),
        ({"products": [{"id": "a"}]}, ["a"]),
        ({"documents": [{"id": "a"}, "junk"]}, ["a"]),
        ({"unexpected": []}, []),
        ("nope", []),
    ],
)
def test_extract_documents_shapes(payload, expected_ids):
    assert [doc["id"] for doc in extract_documents(payload)] == expected_ids


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"brands": {"b-1": " Inoar "}}, {"b-1": "Inoar"}),
        ({"brands": [{"id": "b-1", "name": "Inoar"}, {"id": "b-2"}]}, {"b-1": "Inoar"}),
        ([{"id": "b-3", "name": "COSRX"}, "junk"], {"b-3": "COSRX"}),
        ({"b-4": "", "b-5": "Argania"}, {"b-5": "Argania"}),
        (None, {}),
    ],
)
def test_extract_brand_names_shapes(payload, expected):
    assert extract_brand_names(payload) == expected


@pytest.mark.asyncio
async def test_http_store_fetches_top_products(respx_mock):
    route = respx_mock.get("http://catalog.local/products").mock(
        return_value=Response(200, json={"products": [{"id": "p-1"}, {"id": "p-2"}]})
    )
    store = HttpCatalogStore("http://catalog.local/", timeout=2.0)

    records = await store.fetch_top_products(1)

    assert [record["id"] for record in records] == ["p-1"]
    request = route.calls.last.request
    assert request.url.params["orderBy"] == "score"
    assert request.url.params["direction"] == "desc"
    assert request.url.params["limit"] == "1"


@pytest.mark.asyncio
async def test_http_store_batches_brand_lookup(respx_mock):
    route = respx_mock.get("http://catalog.local/brands").mock(
        return_value=Response(200, json={"brands": [{"id": "b-1", "name": "Inoar"}, {"id": "b-2", "name": "COSRX"}]})
    )
    store = HttpCatalogStore("http://catalog.local")

    names = await store.fetch_brand_names({"b-2", "b-1"})

    assert names == {"b-1": "Inoar", "b-2": "COSRX"}
    assert route.call_count == 1
    assert route.calls.last.request.url.params["ids"] == "b-1,b-2"


@pytest.mark.asyncio
async def test_http_store_skips_brand_request_without_ids(respx_mock):
    store = HttpCatalogStore("http://catalog.local")

    assert await store.fetch_brand_names(set()) == {}
    assert not respx_mock.calls


@pytest.mark.asyncio
async def test_http_store_raises_on_error_status(respx_mock):
    respx_mock.get("http://catalog.local/products").mock(return_value=Response(500, json={"error": "boom"}))
    store = HttpCatalogStore("http://catalog.local")

    with pytest.raises(CatalogFetchError) as excinfo:
        await store.fetch_top_products(10)
    assert excinfo.value.details["status"] == 500


@pytest.mark.asyncio
async def test_http_store_raises_on_invalid_json(respx_mock):
    respx_mock.get("http://catalog.local/products").mock(return_value=Response(200, text="<html>"))
    store = HttpCatalogStore("http://catalog.local")

    with pytest.raises(CatalogFetchError):
        await store.fetch_top_products(10)


@pytest.mark.asyncio
async def test_http_store_raises_on_network_error(respx_mock):
    respx_mock.get("http://catalog.local/products").mock(side_effect=httpx.ConnectError("unreachable"))
    store = HttpCatalogStore("http://catalog.local")

    with pytest.raises(CatalogFetchError):
        await store.fetch_top_products(10)
