"""Tests for the file-backed map store."""

from pathlib import Path

import pytest

from mindmap_editor.config import DEFAULT_ROOT_LABEL
from mindmap_editor.models.node import MindMap
from mindmap_editor.store import MapStore, slugify


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Study Plan", "study-plan"),
        ("  Física & Química! ", "f-sica-qu-mica"),
        ("???", "map"),
    ],
)
def test_slugify(name: str, expected: str) -> None:
    assert slugify(name) == expected


def test_missing_datadir_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="not found"):
        MapStore(tmp_path / "missing")


def test_missing_datadir_allowed_in_dry_run(tmp_path: Path) -> None:
    MapStore(tmp_path / "missing", dry_run=True)


def test_create_makes_single_root_map(store: MapStore) -> None:
    mind_map = store.create("Study Plan")
    assert mind_map.id == "study-plan"
    assert mind_map.root.label == DEFAULT_ROOT_LABEL
    assert mind_map.root.children == ()
    assert store.load("study-plan") == mind_map


def test_create_picks_unique_id(store: MapStore) -> None:
    first = store.create("Notes")
    second = store.create("Notes")
    assert first.id == "notes"
    assert second.id == "notes-1"


def test_save_skips_unchanged(store: MapStore, stored_map: MindMap) -> None:
    assert store.save(stored_map) is False


def test_save_writes_readable_json(store: MapStore, stored_map: MindMap, tmp_path: Path) -> None:
    text = (tmp_path / "study.json").read_text(encoding="utf-8")
    assert text.endswith("\n")
    assert '"name": "Study Plan"' in text


def test_dry_run_does_not_write(tmp_path: Path, stored_map: MindMap) -> None:
    dry = MapStore(tmp_path, dry_run=True)
    dry.create("Other")
    assert not (tmp_path / "other.json").exists()


def test_load_missing_raises_key_error(store: MapStore) -> None:
    with pytest.raises(KeyError):
        store.load("nothing")


def test_invalid_map_id_rejected(store: MapStore) -> None:
    with pytest.raises(ValueError, match="Invalid map id"):
        store.load("../etc/passwd")


def test_delete(store: MapStore, stored_map: MindMap) -> None:
    store.delete("study")
    assert not store.exists("study")
    with pytest.raises(KeyError):
        store.delete("study")


def test_list_maps_sorted_and_skips_broken(store: MapStore, tmp_path: Path) -> None:
    store.create("zeta")
    store.create("Alpha")
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    assert [m.name for m in store.list_maps()] == ["Alpha", "zeta"]


def test_resolve_by_id_or_name(store: MapStore, stored_map: MindMap) -> None:
    assert store.resolve("study") == "study"
    assert store.resolve("Study Plan") == "study"
    assert store.resolve("Unknown") is None
