"""JSON persistence for the group/person/photo tree.

Document layout::

    {"version": 1, "groups": [
        {"id": ..., "name": ..., "persons": [
            {"id": ..., "name": ..., "photos": [
                {"id": ..., "name": ..., "content": ..., "createdAt": ...}]}]}]}

`content` is a string, or `{"base64": ...}` for binary payloads. Ids are
unique across the whole document; later rows repeating an id are dropped.

`load()` never raises for bad data: a missing, unreadable or malformed file
yields an empty tree, and malformed rows are skipped with an error log.
"""

from __future__ import annotations

import base64
from collections.abc import Iterator
from datetime import datetime
import json
import os
from pathlib import Path
import tempfile
from typing import Any

from loguru import logger

from core.models import Group, Person, Photo, Tree
from core.services import tree_store
from core.services.interfaces import ITreeRepository
from infrastructure.utils import format_stored_datetime, parse_stored_datetime

FORMAT_VERSION = 1
BYTES_KEY = "base64"


def _require_str(row: dict[str, Any], key: str) -> str:
    value = row.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"missing or invalid {key!r}")
    return value


def _rows(value: Any, key: str) -> list[dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{key!r} must be a list")
    return value


def _encode_content(content: str | bytes) -> str | dict[str, str]:
    if isinstance(content, bytes):
        return {BYTES_KEY: base64.b64encode(content).decode("ascii")}
    return content


def _decode_content(value: Any) -> str | bytes:
    if isinstance(value, dict):
        encoded = value.get(BYTES_KEY)
        if not isinstance(encoded, str):
            raise ValueError(f"content object needs a {BYTES_KEY!r} string")
        return base64.b64decode(encoded, validate=True)
    return str(value or "")


class JsonTreeRepository(ITreeRepository):
    """Load and save the tree as a single JSON document."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Tree:
        """Return the stored tree, or an empty tree if absent or corrupt."""
        if not self._path.exists():
            logger.info("No stored tree at {}; starting empty", self._path)
            return Tree()
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as ex:
            logger.warning("Stored tree unreadable at {} ({}); starting empty", self._path, ex)
            return Tree()

        if isinstance(data, list):
            # Bare group list as written by the browser build.
            raw_groups: Any = data
        elif isinstance(data, dict):
            raw_groups = data.get("groups", [])
        else:
            logger.warning("Stored tree has unexpected type {}; starting empty", type(data))
            return Tree()
        if not isinstance(raw_groups, list):
            logger.warning("Stored tree 'groups' is not a list; starting empty")
            return Tree()

        tree = tree_store.with_groups(Tree(), list(self._parse_groups(raw_groups)))
        logger.info(
            "Loaded tree: {} | groups={} items={}",
            self._path,
            len(tree.groups),
            tree_store.count_items(tree),
        )
        return tree

    def _parse_groups(self, rows: list[Any]) -> Iterator[Group]:
        seen: set[str] = set()
        for row in rows:
            try:
                group_id = _require_str(row, "id")
                if group_id in seen:
                    logger.error("Duplicate group id skipped: {}", group_id)
                    continue
                group = Group(
                    id=group_id,
                    name=_require_str(row, "name"),
                    persons=tuple(
                        self._parse_persons(_rows(row.get("persons"), "persons"), seen)
                    ),
                )
            except (ValueError, TypeError, AttributeError) as ex:
                logger.error("Group row error: {} | row={}", ex, row)
                continue
            seen.add(group.id)
            yield group

    def _parse_persons(self, rows: list[Any], seen: set[str]) -> Iterator[Person]:
        for row in rows:
            try:
                person_id = _require_str(row, "id")
                if person_id in seen:
                    logger.error("Duplicate person id skipped: {}", person_id)
                    continue
                person = Person(
                    id=person_id,
                    name=_require_str(row, "name"),
                    photos=tuple(self._parse_photos(_rows(row.get("photos"), "photos"), seen)),
                )
            except (ValueError, TypeError, AttributeError) as ex:
                logger.error("Person row error: {} | row={}", ex, row)
                continue
            seen.add(person.id)
            yield person

    @staticmethod
    def _parse_photos(rows: list[Any], seen: set[str]) -> Iterator[Photo]:
        for row in rows:
            try:
                photo_id = _require_str(row, "id")
                if photo_id in seen:
                    logger.error("Duplicate photo id skipped: {}", photo_id)
                    continue
                created = parse_stored_datetime(row.get("createdAt", row.get("timestamp")))
                # "url" is the content key used by the browser build.
                photo = Photo(
                    id=photo_id,
                    name=_require_str(row, "name"),
                    content=_decode_content(row.get("content", row.get("url"))),
                    created_at=created or datetime.fromtimestamp(0),
                )
            except (ValueError, TypeError, AttributeError) as ex:
                logger.error("Photo row error: {} | row={}", ex, row)
                continue
            seen.add(photo.id)
            yield photo

    def save(self, tree: Tree) -> None:
        """Write `tree` atomically to the repository path."""
        doc = {
            "version": FORMAT_VERSION,
            "groups": [
                {
                    "id": g.id,
                    "name": g.name,
                    "persons": [
                        {
                            "id": p.id,
                            "name": p.name,
                            "photos": [
                                {
                                    "id": ph.id,
                                    "name": ph.name,
                                    "content": _encode_content(ph.content),
                                    "createdAt": format_stored_datetime(ph.created_at),
                                }
                                for ph in p.photos
                            ],
                        }
                        for p in g.persons
                    ],
                }
                for g in tree.groups
            ],
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=self._path.name, suffix=".tmp", dir=str(self._path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Saved tree to {} (groups={})", self._path, len(tree.groups))
