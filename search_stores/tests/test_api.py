"""
Tests for the search store API endpoints.

Requests go through Django's AsyncClient; the upstream service is the
in-memory fake backend shared by every per-request service.
"""

import json

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import AsyncClient

from search_stores.api import http_status_for
from search_stores.exceptions import (
    BackendError,
    InvalidRequestError,
    OperationTimeoutError,
    StoreNotFoundError,
    TransientError,
)
from search_stores.tests.fakes import FakeSearchStoreBackend, FakeUpstream

HEADERS = {"x-api-key": "test-key"}


@pytest.fixture
def upstream(fake_backend_registered):
    return fake_backend_registered


@pytest.fixture
def client():
    return AsyncClient(headers=HEADERS)


async def post_json(client, path, payload):
    return await client.post(path, json.dumps(payload), content_type="application/json")


class TestAuthentication:
    @pytest.mark.asyncio
    async def test_missing_api_key_is_rejected(self, upstream):
        response = await AsyncClient().get("/api/stores")

        assert response.status_code == 401
        assert "x-api-key" in response.json()["detail"]
        assert sum(upstream.calls.values()) == 0


class TestStoreEndpoints:
    @pytest.mark.asyncio
    async def test_create_and_list(self, client, upstream):
        response = await post_json(client, "/api/stores", {"display_name": "docs-en"})

        assert response.status_code == 200
        store = response.json()
        assert store["display_name"] == "docs-en"
        assert store["store_id"] == f"fileSearchStores/{store['short_id']}"
        assert store["create_time"] is not None

        response = await client.get("/api/stores")
        data = response.json()
        assert data["count"] == 1
        assert data["stores"][0]["display_name"] == "docs-en"

    @pytest.mark.asyncio
    async def test_blank_display_name_is_rejected(self, client, upstream):
        response = await post_json(client, "/api/stores", {"display_name": "   "})

        assert response.status_code == 400
        assert upstream.calls["create_store"] == 0

    @pytest.mark.asyncio
    async def test_get_missing_store(self, client, upstream):
        response = await client.get("/api/stores/missing")

        assert response.status_code == 404
        assert "missing" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_delete_store(self, client, upstream):
        upstream.add_store("old")

        response = await client.delete("/api/stores/old")

        assert response.status_code == 200
        assert upstream.stores == {}
        response = await client.get("/api/stores/old")
        assert response.status_code == 404


class TestDocumentEndpoints:
    @pytest.mark.asyncio
    async def test_upload_list_and_delete(self, client, upstream):
        store = upstream.add_store("docs")

        response = await client.post(
            "/api/stores/docs/upload",
            {
                "files": [
                    SimpleUploadedFile("guide.md", b"# Guide", content_type="text/markdown"),
                    SimpleUploadedFile("notes.txt", b"notes", content_type="text/plain"),
                ],
                "custom_metadata": json.dumps([{"key": "lang", "stringValue": "en"}]),
                "max_tokens_per_chunk": "300",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success_count"] == 2
        assert data["fail_count"] == 0
        assert {result["file_name"] for result in data["results"]} == {"guide.md", "notes.txt"}
        uploads = {upload["display_name"]: upload for upload in upstream.uploads}
        assert uploads["guide.md"]["mime_type"] == "text/markdown"
        assert uploads["guide.md"]["custom_metadata"] == [{"key": "lang", "string_value": "en"}]
        assert uploads["notes.txt"]["chunking_config"]["white_space_config"] == {
            "max_tokens_per_chunk": 300,
            "max_overlap_tokens": 50,
        }

        response = await client.get("/api/stores/docs/documents")
        assert response.json()["count"] == 2

        response = await client.get("/api/stores/docs/documents/guide.md")
        assert response.status_code == 200
        assert response.json()["mime_type"] == "text/markdown"

        response = await client.delete("/api/stores/docs/documents/guide.md")
        assert response.status_code == 200
        assert upstream.documents_named(store.store_id, "guide.md") == []

    @pytest.mark.asyncio
    async def test_upload_reports_failed_files(self, client, upstream):
        upstream.add_store("docs")
        upstream.operation_error = {"message": "unsupported"}

        response = await client.post(
            "/api/stores/docs/upload",
            {"files": [SimpleUploadedFile("bad.bin", b"\x00\x01")]},
        )

        data = response.json()
        assert response.status_code == 200
        assert data["fail_count"] == 1
        assert data["results"][0]["success"] is False
        assert "unsupported" in data["results"][0]["error"]

    @pytest.mark.asyncio
    async def test_upload_rejects_out_of_range_chunking(self, client, upstream):
        upstream.add_store("docs")

        response = await client.post(
            "/api/stores/docs/upload",
            {"files": [SimpleUploadedFile("a.txt", b"a")], "max_tokens_per_chunk": "50"},
        )

        assert response.status_code == 422
        assert upstream.calls["upload_document"] == 0

    @pytest.mark.asyncio
    async def test_upload_rejects_malformed_metadata(self, client, upstream):
        upstream.add_store("docs")

        response = await client.post(
            "/api/stores/docs/upload",
            {"files": [SimpleUploadedFile("a.txt", b"a")], "custom_metadata": "{not json"},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_replace_document(self, client, upstream):
        store = upstream.add_store("docs")
        old = upstream.add_document(store.store_id, "guide.md")

        response = await client.post(
            "/api/stores/docs/documents/guide.md/replace",
            {"file": SimpleUploadedFile("upload.md", b"# New")},
        )

        assert response.status_code == 200
        [current] = upstream.documents_named(store.store_id, "guide.md")
        assert response.json()["document_id"] == current.document_id
        assert current.document_id != old.document_id

    @pytest.mark.asyncio
    async def test_replace_timeout_maps_to_504(self, client, upstream, settings):
        settings.SEARCH_STORE_POLL_MAX_ATTEMPTS = 2
        store = upstream.add_store("docs")
        old = upstream.add_document(store.store_id, "guide.md")
        upstream.polls_until_done = None

        response = await client.post(
            "/api/stores/docs/documents/guide.md/replace",
            {"file": SimpleUploadedFile("upload.md", b"# New")},
        )

        assert response.status_code == 504
        assert old.document_id in upstream.documents[store.store_id]


class TestQueryEndpoint:
    @pytest.mark.asyncio
    async def test_query_returns_grounded_answer(self, client, upstream):
        store = upstream.add_store("docs")
        upstream.add_document(store.store_id, "guide.md")

        response = await post_json(
            client,
            "/api/stores/docs/query",
            {
                "query": "How do I install it?",
                "metadata_filter": 'lang = "en"',
                "generation_config": {"temperature": 0.3},
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["text"]
        assert data["grounding_metadata"]["cited_chunks"][0]["title"] == "guide.md"
        [call] = upstream.generations
        assert call["config"]["temperature"] == 0.3
        assert call["config"]["tools"][0]["file_search"]["metadata_filter"] == 'lang = "en"'

    @pytest.mark.asyncio
    async def test_query_by_store_id_skips_lookup(self, client, upstream):
        store = upstream.add_store("docs")

        response = await post_json(
            client, f"/api/stores/by-id/{store.short_id}/query", {"query": "What is inside?"}
        )

        assert response.status_code == 200
        assert upstream.calls["list_stores_page"] == 0
        names = upstream.generations[0]["config"]["tools"][0]["file_search"]["file_search_store_names"]
        assert names == [store.store_id]

    @pytest.mark.asyncio
    async def test_blank_query_is_rejected(self, client, upstream):
        upstream.add_store("docs")

        response = await post_json(client, "/api/stores/docs/query", {"query": "  "})

        assert response.status_code == 400
        assert upstream.calls["generate_content"] == 0

    @pytest.mark.asyncio
    async def test_rate_limit_after_retries_maps_to_429(self, client, upstream):
        upstream.add_store("docs")
        upstream.fail("generate_content", *[TransientError("quota", status_code=429) for _ in range(4)])

        response = await post_json(client, "/api/stores/docs/query", {"query": "q"})

        assert response.status_code == 429
        assert "rate limit" in response.json()["detail"]
        assert upstream.calls["generate_content"] == 4


class TestApiKeyIsolation:
    @pytest.mark.asyncio
    async def test_stores_of_one_key_are_invisible_to_another(self, upstream, monkeypatch):
        account_a, account_b = FakeUpstream(), FakeUpstream()
        monkeypatch.setattr(
            FakeSearchStoreBackend, "upstreams_by_key", {"key-a": account_a, "key-b": account_b}
        )
        client_a = AsyncClient(headers={"x-api-key": "key-a"})
        client_b = AsyncClient(headers={"x-api-key": "key-b"})

        response = await post_json(client_a, "/api/stores", {"display_name": "docs"})
        assert response.status_code == 200
        store_id = response.json()["store_id"]

        response = await client_b.get("/api/stores/docs")
        assert response.status_code == 404
        assert account_b.calls["list_stores_page"] == 1

        response = await client_b.delete("/api/stores/docs")
        assert response.status_code == 404
        assert store_id in account_a.stores

        response = await client_a.get("/api/stores/docs")
        assert response.status_code == 200
        assert response.json()["store_id"] == store_id
        assert account_a.calls["list_stores_page"] == 0


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, upstream):
        response = await AsyncClient().get("/api/system/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["backend"] == "fake"
        assert "gemini" in data["available_backends"]


@pytest.mark.parametrize(
    "error,status",
    [
        (StoreNotFoundError("missing", status_code=404), 404),
        (InvalidRequestError("bad"), 400),
        (TransientError("busy"), 503),
        (TransientError("quota", status_code=429), 429),
        (OperationTimeoutError("slow"), 504),
        (BackendError("denied", "gemini", status_code=403), 403),
        (BackendError("odd", "gemini", status_code=418), 500),
    ],
)
def test_http_status_for(error, status):
    assert http_status_for(error) == status
