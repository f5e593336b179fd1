"""End-to-end flows through SearchStoreService against the fake upstream."""

import pytest

from search_stores import SearchStoreService
from search_stores.exceptions import ConfigurationError, StoreNotFoundError
from search_stores.tests.fakes import FakeSearchStoreBackend, FakeUpstream
from search_stores.types import CustomMetadataEntry, UploadOptions


@pytest.mark.asyncio
async def test_store_lifecycle(service, upstream, tmp_path):
    guide = tmp_path / "guide.md"
    guide.write_text("# Guide\n\nInstall with pip.\n")

    store = await service.stores.get_or_create("docs-en")
    operation = await service.uploader.upload(
        store,
        guide,
        UploadOptions(custom_metadata=[CustomMetadataEntry("lang", string_value="en")]),
    )
    assert operation.succeeded

    result = await service.queries.ask(store, "How do I install it?", metadata_filter='lang = "en"')
    assert result.text
    assert [chunk.title for chunk in result.grounding_metadata.cited_chunks] == ["guide.md"]

    await service.documents.update(store, "guide.md", b"# Guide v2")
    documents = await service.documents.list(store)
    assert [doc.display_name for doc in documents] == ["guide.md"]
    assert documents[0].document_id != operation.document_id

    await service.stores.delete(store)
    with pytest.raises(StoreNotFoundError):
        await service.stores.find_by_display_name("docs-en")


@pytest.mark.asyncio
async def test_components_share_cache_and_config(service, cache):
    assert service.stores.cache is cache
    assert service.documents.uploader is service.uploader
    assert service.uploader.poller is service.poller
    assert service.poller.interval == service.config.poll_interval
    assert service.queries.default_model == service.config.default_model


def test_for_api_key_uses_registry(fake_backend_registered):
    service = SearchStoreService.for_api_key("caller-key", overrides={"poll_max_attempts": 7})

    assert isinstance(service.backend, FakeSearchStoreBackend)
    assert service.backend.api_key == "caller-key"
    assert service.backend.upstream is fake_backend_registered
    assert service.poller.max_attempts == 7


def test_for_api_key_unknown_backend(fake_backend_registered):
    with pytest.raises(ConfigurationError):
        SearchStoreService.for_api_key("key", backend="missing")


@pytest.mark.asyncio
async def test_services_for_different_keys_do_not_share_stores(fake_backend_registered, monkeypatch):
    account_a, account_b = FakeUpstream(), FakeUpstream()
    monkeypatch.setattr(
        FakeSearchStoreBackend, "upstreams_by_key", {"key-a": account_a, "key-b": account_b}
    )
    service_a = SearchStoreService.for_api_key("key-a")
    service_b = SearchStoreService.for_api_key("key-b")

    await service_a.stores.create("docs")

    with pytest.raises(StoreNotFoundError):
        await service_b.stores.find_by_display_name("docs")
    assert service_a.cache is not service_b.cache
    assert SearchStoreService.for_api_key("key-a").cache is service_a.cache
