import json
import os
from pathlib import Path

import pytest

from token_uri.errors import InvalidArgument
from token_uri.registry.filesystem_store import FilesystemConfigStore
from token_uri.registry.resolver import UriResolver


def test_missing_file_starts_empty(tmp_path: Path):
    store = FilesystemConfigStore(tmp_path / "state.json", default_base_uri="https://api.example.com/meta/")

    assert store.token_ids() == []
    assert UriResolver(store).resolve(1) == "https://api.example.com/meta/"
    # Nothing is written until the first mutation.
    assert not store.path.exists()


def test_mutations_are_persisted_and_reloaded(tmp_path: Path):
    path = tmp_path / "nested" / "state.json"
    store = FilesystemConfigStore(path, default_base_uri="https://api.example.com/meta/")
    store.set_base_path_config(7, "https://cdn.example.com/v2", True)
    store.set_explicit_uri(8, "ipfs://QmXYZ")
    store.set_collection_metadata_uri("ipfs://collection.json")

    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert on_disk["tokens"]["7"]["base_uri"] == "https://cdn.example.com/v2"
    assert on_disk["contract_metadata_uri"] == "ipfs://collection.json"

    reloaded = FilesystemConfigStore(path, default_base_uri="https://api.example.com/meta/")
    resolver = UriResolver(reloaded)
    assert resolver.resolve(7) == "https://cdn.example.com/v2/7"
    assert resolver.resolve(8) == "ipfs://QmXYZ"
    assert resolver.resolve(9) == "https://api.example.com/meta/"
    assert reloaded.get_collection_metadata_uri() == "ipfs://collection.json"


def test_default_base_uri_comes_from_file_when_not_given(tmp_path: Path):
    path = tmp_path / "state.json"
    FilesystemConfigStore(path, default_base_uri="https://a/").set_collection_metadata_uri("x")

    assert FilesystemConfigStore(path).default_base_uri == "https://a/"
    assert FilesystemConfigStore(path, default_base_uri="https://b/").default_base_uri == "https://b/"


def test_rejected_write_does_not_touch_file(tmp_path: Path):
    path = tmp_path / "state.json"
    store = FilesystemConfigStore(path)
    store.set_explicit_uri(1, "ar://x")
    before = path.read_text(encoding="utf-8")

    with pytest.raises(InvalidArgument):
        store.set_explicit_uri(1, "")

    assert path.read_text(encoding="utf-8") == before


def test_no_temp_files_left_behind(tmp_path: Path):
    store = FilesystemConfigStore(tmp_path / "state.json")
    for i in range(5):
        store.set_base_path_config(i, "ipfs://abc", True)

    assert [p.name for p in tmp_path.iterdir()] == ["state.json"]


def test_non_object_state_file_is_rejected(tmp_path: Path):
    path = tmp_path / "state.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    with pytest.raises(ValueError):
        FilesystemConfigStore(path)


def test_each_mutation_fsyncs_before_replace(tmp_path: Path, monkeypatch):
    calls = []
    real_fsync = os.fsync
    real_replace = os.replace

    def fake_fsync(fd):
        calls.append("fsync")
        real_fsync(fd)

    def fake_replace(src, dst):
        calls.append("replace")
        real_replace(src, dst)

    monkeypatch.setattr(os, "fsync", fake_fsync)
    monkeypatch.setattr(os, "replace", fake_replace)

    store = FilesystemConfigStore(tmp_path / "state.json")
    store.set_base_path_config(1, "ipfs://abc", True)
    store.set_explicit_uri(1, "ar://x")
    store.clear_explicit_uri(1)

    assert calls == ["fsync", "replace"] * 3


def test_non_object_token_entry_is_rejected(tmp_path: Path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"tokens": {"1": "oops"}}), encoding="utf-8")

    with pytest.raises(ValueError):
        FilesystemConfigStore(path)
