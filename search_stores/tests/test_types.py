"""Tests for store naming helpers and request value objects."""

import pytest

from search_stores.exceptions import InvalidRequestError
from search_stores.types import (
    AsyncOperation,
    ChunkingConfig,
    CustomMetadataEntry,
    GenerationParams,
    StoreDescriptor,
    UploadOutcome,
    extract_store_id,
    full_store_name,
)


class TestStoreNames:
    def test_extract_store_id(self):
        assert extract_store_id("fileSearchStores/abc-123") == "abc-123"
        assert extract_store_id("abc-123") == "abc-123"

    def test_full_store_name(self):
        assert full_store_name("abc-123") == "fileSearchStores/abc-123"
        assert full_store_name("fileSearchStores/abc-123") == "fileSearchStores/abc-123"

    def test_short_id(self):
        store = StoreDescriptor(store_id="fileSearchStores/abc-123", display_name="docs")
        assert store.short_id == "abc-123"


class TestCustomMetadataEntry:
    def test_wire_shapes(self):
        assert CustomMetadataEntry("lang", string_value="en").to_wire() == {
            "key": "lang",
            "string_value": "en",
        }
        assert CustomMetadataEntry("year", numeric_value=2024).to_wire() == {
            "key": "year",
            "numeric_value": 2024,
        }
        assert CustomMetadataEntry("tags", string_list_value=["a", "b"]).to_wire() == {
            "key": "tags",
            "string_list_value": {"values": ["a", "b"]},
        }

    def test_requires_exactly_one_value(self):
        with pytest.raises(InvalidRequestError):
            CustomMetadataEntry("lang")
        with pytest.raises(InvalidRequestError):
            CustomMetadataEntry("lang", string_value="en", numeric_value=1)

    def test_requires_key(self):
        with pytest.raises(InvalidRequestError):
            CustomMetadataEntry("", string_value="en")

    def test_from_dict_accepts_camel_case(self):
        entry = CustomMetadataEntry.from_dict({"key": "tags", "stringListValue": {"values": ["x"]}})
        assert entry.string_list_value == ["x"]

        entry = CustomMetadataEntry.from_dict({"key": "year", "numericValue": 2020})
        assert entry.numeric_value == 2020

    def test_from_dict_accepts_snake_case(self):
        entry = CustomMetadataEntry.from_dict({"key": "lang", "string_value": "fr"})
        assert entry.string_value == "fr"


class TestChunkingConfig:
    def test_defaults(self):
        assert ChunkingConfig().to_wire() == {
            "white_space_config": {"max_tokens_per_chunk": 500, "max_overlap_tokens": 50}
        }

    @pytest.mark.parametrize(
        "max_tokens,overlap",
        [(0, 0), (-5, 0), (100, -1), (100, 100), (100, 150)],
    )
    def test_invalid_values(self, max_tokens, overlap):
        with pytest.raises(InvalidRequestError):
            ChunkingConfig(max_tokens_per_chunk=max_tokens, max_overlap_tokens=overlap)


def test_generation_params_only_forward_set_fields():
    assert GenerationParams().to_config() == {}
    assert GenerationParams(temperature=0.0, top_k=5).to_config() == {"temperature": 0.0, "top_k": 5}


def test_operation_and_outcome_success():
    done = AsyncOperation("op", done=True, document_id="doc")
    failed = AsyncOperation("op", done=True, error={"message": "bad file"})

    assert done.succeeded
    assert not failed.succeeded
    assert not AsyncOperation("op").succeeded
    assert UploadOutcome("a.md", operation=done).succeeded
    assert not UploadOutcome("a.md", operation=failed).succeeded
    assert not UploadOutcome("a.md", error=RuntimeError("x")).succeeded
