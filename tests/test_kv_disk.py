"""Tests for the Disk backend."""

import pytest

from livekv.kv.disk import Disk


@pytest.fixture
def disk_store(tmp_path):
    store = Disk(str(tmp_path))
    yield store, str(tmp_path)
    store.close()


class TestDiskBasic:
    def test_set_get(self, disk_store):
        store, _ = disk_store
        store.set("k", "v")
        assert store.get("k") == "v"

    def test_get_missing(self, disk_store):
        store, _ = disk_store
        assert store.get("nope") is None

    def test_contains(self, disk_store):
        store, _ = disk_store
        store.set("k", "v")
        assert "k" in store
        assert "nope" not in store

    def test_set_none_removes(self, disk_store):
        store, _ = disk_store
        store.set("k", "v")
        store.set("k", None)
        assert store.get("k") is None
        store.set("never", None)  # should not raise

    def test_keys(self, disk_store):
        store, _ = disk_store
        store.set("a", "1")
        store.set("b", "2")
        assert set(store.keys()) == {"a", "b"}

    def test_type_error_on_non_str(self, disk_store):
        store, _ = disk_store
        with pytest.raises(TypeError, match="Expected str"):
            store.set("k", 42)  # type: ignore[arg-type]


class TestDiskPersistence:
    def test_survives_reload(self, disk_store):
        store, tmpdir = disk_store
        store.set("k", "persistent")
        store.close()
        store2 = Disk(tmpdir)
        try:
            assert store2.get("k") == "persistent"
        finally:
            store2.close()
