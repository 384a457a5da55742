"""File-backed store for mind map documents.

Each map lives in ``<datadir>/<map_id>.json``. Writes are skipped when the
serialized contents did not change, so mtimes only move on real edits.
"""

import json
import re
from pathlib import Path

from loguru import logger

from mindmap_editor.config import DEFAULT_ROOT_LABEL
from mindmap_editor.core.importer.json_reader import mind_map_to_dict, parse_mind_map
from mindmap_editor.core.tree.mutation import make_node
from mindmap_editor.models.node import MindMap, Node

_SUFFIX = ".json"
_MAP_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "map"


class MapStore:
    """Load and save mind maps in a data directory."""

    def __init__(self, datadir: str | Path, *, dry_run: bool = False) -> None:
        self.datadir = Path(datadir).resolve()
        self.dry_run = dry_run

        if not dry_run and not self.datadir.is_dir():
            msg = f"Data directory {str(self.datadir)!r} not found"
            raise ValueError(msg)

        logger.debug("Store ready, datadir {!r}, dry_run {!r}", str(self.datadir), dry_run)

    def _path(self, map_id: str) -> Path:
        if not _MAP_ID_RE.match(map_id):
            msg = f"Invalid map id: {map_id!r}"
            raise ValueError(msg)
        return self.datadir / (map_id + _SUFFIX)

    def make_unique_id(self, base: str) -> str:
        """Append numbers to ``base`` until no stored map uses it."""
        candidate = base
        count = 0
        while self._path(candidate).exists():
            count += 1
            candidate = f"{base}-{count}"
        return candidate

    def create(self, name: str, *, root: Node | None = None) -> MindMap:
        """Create and save a new map with a single root topic (or ``root``)."""
        map_id = self.make_unique_id(slugify(name))
        mind_map = MindMap(
            id=map_id,
            name=name,
            root=root if root is not None else make_node(DEFAULT_ROOT_LABEL),
        )
        self.save(mind_map)
        return mind_map

    def exists(self, map_id: str) -> bool:
        return self._path(map_id).exists()

    def load(self, map_id: str) -> MindMap:
        """Read a map.

        Raises:
            KeyError: If no map with that id is stored.
        """
        path = self._path(map_id)
        try:
            contents = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise KeyError(map_id) from None
        return parse_mind_map(json.loads(contents))

    def save(self, mind_map: MindMap) -> bool:
        """Write a map. Returns True if the file was created or changed."""
        path = self._path(mind_map.id)
        contents = json.dumps(mind_map_to_dict(mind_map), indent=2, ensure_ascii=False) + "\n"

        action = "create"
        try:
            if path.read_text(encoding="utf-8") == contents:
                logger.debug("Unchanged, not writing {!r}", str(path))
                return False
            action = "update"
        except FileNotFoundError:
            pass

        if self.dry_run:
            logger.info("dry-run: would {} {!r}", action, str(path))
        else:
            logger.debug("Writing ({}) {!r}", action, str(path))
            path.write_text(contents, encoding="utf-8")
        return True

    def delete(self, map_id: str) -> None:
        path = self._path(map_id)
        if not path.exists():
            raise KeyError(map_id)
        if self.dry_run:
            logger.info("dry-run: would remove {!r}", str(path))
        else:
            logger.info("Removing {!r}", str(path))
            path.unlink()

    def list_maps(self) -> list[MindMap]:
        maps = []
        for path in sorted(self.datadir.glob("*" + _SUFFIX)):
            try:
                maps.append(parse_mind_map(json.loads(path.read_text(encoding="utf-8"))))
            except (ValueError, KeyError):
                logger.warning("Skipping unreadable map file {!r}", str(path))
        return sorted(maps, key=lambda m: m.name.lower())

    def resolve(self, ref: str) -> str | None:
        """Resolve a map id or name to a map id."""
        if _MAP_ID_RE.match(ref) and self.exists(ref):
            return ref
        for mind_map in self.list_maps():
            if mind_map.name == ref:
                return mind_map.id
        return None
