"""Draft store tests: key derivation, retention window, media and failures."""

from __future__ import annotations

import errno
from datetime import timedelta

import pytest

from reporting.drafts import DraftStore, FileDraftMedium, MemoryDraftMedium, derive_key
from reporting.errors import DraftLoadError, StorageError
from reporting.rows import FinancialRow

DAY_MS = 24 * 60 * 60 * 1000


def _rows(q1: float = 1.0) -> list[FinancialRow]:
    return [FinancialRow(
        id="cat", title="Cat", is_category=True,
        children=[FinancialRow(id="l", title="Line", q1=q1, comments="x")],
    )]


class _BrokenMedium(MemoryDraftMedium):
    def get(self, key: str) -> str | None:
        raise OSError(errno.EIO, "disk unreadable")

    def delete(self, key: str) -> None:
        raise OSError(errno.EACCES, "read-only")


# ── Keys ───────────────────────────────────────────────────────────────────

class TestDeriveKey:
    def test_plain(self):
        assert derive_key("Kigali", "Q1") == "financial_form_Kigali_Q1"

    @pytest.mark.parametrize("hc,period", [(None, None), ("", ""), (None, "")])
    def test_unset_parts_use_default_token(self, hc, period):
        assert derive_key(hc, period) == "financial_form_default_default"

    def test_partial_selection(self):
        assert derive_key("Kigali", None) == "financial_form_Kigali_default"

    def test_separator_inside_part_cannot_collide(self):
        assert derive_key("a_b", "c") != derive_key("a", "b_c")

    def test_special_characters_are_encoded(self):
        key = derive_key("St. Mary's / Annex", "Q1 2024")
        assert "/" not in key
        assert " " not in key
        assert key.count("_") == 3

    def test_deterministic(self):
        assert derive_key("Kigali HC", "Q2") == derive_key("Kigali HC", "Q2")


# ── Store ──────────────────────────────────────────────────────────────────

class TestDraftStore:
    def test_round_trip(self, store, clock):
        saved = store.save("k", _rows(12.5))
        assert saved.timestamp == clock.now_ms
        loaded = store.load("k")
        assert loaded == saved
        assert loaded.form_data[0].children[0].q1 == 12.5

    def test_absent_key(self, store):
        assert store.load("missing") is None

    def test_overwrite(self, store):
        store.save("k", _rows(1))
        store.save("k", _rows(2))
        assert store.load("k").form_data[0].children[0].q1 == 2

    def test_stored_as_camel_case_json(self, store, medium):
        store.save("k", _rows())
        raw = medium.get("k")
        assert '"formData"' in raw
        assert '"isCategory"' in raw

    def test_valid_at_retention_boundary(self, store, clock):
        store.save("k", _rows())
        clock.advance(DAY_MS)
        assert store.load("k") is not None

    def test_expired_just_past_boundary(self, store, clock, medium):
        store.save("k", _rows())
        clock.advance(DAY_MS + 1)
        assert store.load("k") is None
        assert "k" not in medium

    def test_future_dated_draft_is_discarded(self, store, clock, medium):
        store.save("k", _rows())
        clock.advance(-60_000)
        assert store.load("k") is None
        assert "k" not in medium

    def test_custom_retention(self, medium, clock):
        store = DraftStore(medium, retention=timedelta(minutes=5), clock=clock)
        store.save("k", _rows())
        clock.advance(5 * 60 * 1000 + 1)
        assert store.load("k") is None

    def test_remove(self, store):
        store.save("k", _rows())
        store.remove("k")
        assert store.load("k") is None

    def test_remove_missing_is_noop(self, store):
        store.remove("never-written")


class TestDraftStoreFailures:
    def test_invalid_json(self, store, medium):
        medium.set("k", "{{{")
        with pytest.raises(DraftLoadError):
            store.load("k")

    def test_wrong_shape(self, store, medium):
        medium.set("k", '{"formData": "nope", "timestamp": 1}')
        with pytest.raises(DraftLoadError, match="Corrupted draft"):
            store.load("k")

    def test_load_error_is_storage_error(self):
        assert issubclass(DraftLoadError, StorageError)

    def test_unreadable_medium(self, clock):
        store = DraftStore(_BrokenMedium(), clock=clock)
        with pytest.raises(DraftLoadError, match="Could not read"):
            store.load("k")

    def test_quota_exceeded(self, clock):
        store = DraftStore(MemoryDraftMedium(quota_bytes=32), clock=clock)
        with pytest.raises(StorageError, match="Could not save"):
            store.save("k", _rows())

    def test_quota_counts_other_keys(self, clock):
        medium = MemoryDraftMedium(quota_bytes=1000)
        store = DraftStore(medium, clock=clock)
        store.save("a", _rows())
        big = [FinancialRow(id=f"r{i}", title="x" * 40) for i in range(20)]
        with pytest.raises(StorageError):
            store.save("b", big)
        assert "a" in medium

    def test_remove_failure(self, clock):
        store = DraftStore(_BrokenMedium(), clock=clock)
        with pytest.raises(StorageError, match="Could not remove"):
            store.remove("k")


# ── File medium ────────────────────────────────────────────────────────────

@pytest.fixture()
def draft_dir(tmp_path):
    """A directory holding nothing but what the medium writes."""
    path = tmp_path / "medium"
    path.mkdir()
    return path


class TestFileDraftMedium:
    def test_round_trip_through_files(self, tmp_path, clock):
        store = DraftStore(FileDraftMedium(tmp_path / "drafts"), clock=clock)
        key = derive_key("Kigali HC", "Q1")
        store.save(key, _rows(3))
        assert store.load(key).form_data[0].children[0].q1 == 3
        assert [p.suffix for p in (tmp_path / "drafts").iterdir()] == [".json"]

    def test_missing_file(self, draft_dir):
        assert FileDraftMedium(draft_dir).get("absent") is None

    def test_key_with_path_characters_stays_in_directory(self, draft_dir):
        medium = FileDraftMedium(draft_dir)
        medium.set("../escape/key", "{}")
        files = list(draft_dir.iterdir())
        assert len(files) == 1
        assert files[0].parent == draft_dir
        assert medium.get("../escape/key") == "{}"

    def test_delete(self, draft_dir):
        medium = FileDraftMedium(draft_dir)
        medium.set("k", "v")
        medium.delete("k")
        medium.delete("k")
        assert medium.get("k") is None
        assert list(draft_dir.iterdir()) == []

    def test_expired_file_is_removed(self, draft_dir, clock):
        medium = FileDraftMedium(draft_dir)
        store = DraftStore(medium, clock=clock)
        store.save("k", _rows())
        clock.advance(DAY_MS + 1)
        assert store.load("k") is None
        assert list(draft_dir.iterdir()) == []
