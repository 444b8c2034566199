"""
GlyphWeave Message Store
=========================

Loads a glyph message corpus from JSON and serves validated grids.

Corpus format::

    {
      "0": ["1230452341...", "0124..."],
      "1": ["..."]
    }

Keys are message ids written as integers. Each value is a list of digit
fragments; the fragments are concatenated and split into rows on the
line-break glyph ``'5'``.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from shared.logger import GlyphLogger

from glyphweave.core.errors import CorpusFormatError, MessageNotFoundError
from glyphweave.core.models import GlyphGrid

logger = GlyphLogger("glyphweave.collector")


class MessageStore:
    """Read-only collection of message grids keyed by id.

    Usage::

        store = MessageStore.from_json("data/messages.json")
        for grid in store.all():
            ...
        grid = store.get(3)
    """

    def __init__(self, grids: Mapping[int, GlyphGrid]) -> None:
        self._grids: dict[int, GlyphGrid] = dict(sorted(grids.items()))

    @classmethod
    def from_json(cls, path: str | Path) -> MessageStore:
        """Load a corpus file.

        Raises:
            FileNotFoundError: If *path* does not exist.
            CorpusFormatError: If the file is not valid corpus JSON.
        """
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Corpus file not found: {file_path}")

        logger.info(f"Reading corpus: {file_path}")
        try:
            with open(file_path, encoding="utf-8") as fh:
                raw = json.load(fh)
        except json.JSONDecodeError as exc:
            raise CorpusFormatError(
                f"Corpus file {file_path} is not valid JSON: {exc}"
            ) from exc

        store = cls.from_mapping(raw)
        logger.info(f"Loaded {len(store)} messages from {file_path.name}")
        return store

    @classmethod
    def from_mapping(cls, raw: Any) -> MessageStore:
        """Build a store from an already-parsed ``{id: [fragments]}`` object."""
        if not isinstance(raw, Mapping):
            raise CorpusFormatError("Corpus must be a JSON object of id -> fragments.")

        grids: dict[int, GlyphGrid] = {}
        for key, fragments in raw.items():
            try:
                message_id = int(key)
            except (TypeError, ValueError) as exc:
                raise CorpusFormatError(f"Invalid message key '{key}'.") from exc

            if isinstance(fragments, str):
                fragments = [fragments]
            if not isinstance(fragments, list) or not all(
                isinstance(f, str) for f in fragments
            ):
                raise CorpusFormatError(
                    f"Message {message_id} must be a list of digit strings."
                )

            grids[message_id] = GlyphGrid.from_digit_string(
                "".join(fragments), message_id=message_id
            )
            logger.debug(
                f"Message {message_id}: {grids[message_id].height} rows, "
                f"{grids[message_id].glyph_count} glyphs"
            )

        return cls(grids)

    # -- Queries --

    def all(self) -> list[GlyphGrid]:
        """Every grid, ordered by message id."""
        return list(self._grids.values())

    def get(self, message_id: int) -> GlyphGrid:
        try:
            return self._grids[message_id]
        except KeyError:
            raise MessageNotFoundError(message_id) from None

    @property
    def ids(self) -> list[int]:
        return list(self._grids)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._grids

    def __iter__(self) -> Iterator[GlyphGrid]:
        return iter(self._grids.values())

    def __len__(self) -> int:
        return len(self._grids)
