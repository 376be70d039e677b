"""Identifier generation for tree entities."""

from __future__ import annotations

import uuid


class IdGenerator:
    """Issue opaque ids that are unique for the lifetime of the process.

    Ids are uuid4 hex strings. Every issued or reserved id is remembered and
    a repeat is redrawn.
    """

    def __init__(self) -> None:
        self._issued: set[str] = set()

    def __call__(self) -> str:
        new_id = uuid.uuid4().hex
        while new_id in self._issued:
            new_id = uuid.uuid4().hex
        self._issued.add(new_id)
        return new_id

    def reserve(self, ids) -> None:
        """Mark ids loaded from storage as taken."""
        self._issued.update(ids)

