"""Wishlist entry record and the JSON codec for the stored collection.

Stored schema (one medium key, value is a JSON array)::

    [
        {
            "id":      "<str>",
            "name":    "<str>",
            "cover":   "<image id>" | null,
            "url":     "<str>" | null,
            "addedAt": "<ISO-8601>" | <epoch number> | null,
            ...any further keys are carried through unchanged
        }
    ]
"""
import datetime
import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional

from .errors import DeserializationFailure

IGDB_IMAGE_URL = 'https://images.igdb.com/igdb/image/upload/{size}/{image_id}.jpg'

_KNOWN_KEYS = ('id', 'name', 'cover', 'url', 'addedAt')


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def normalise_id(game_id) -> str:
    """Return *game_id* as the string key used for membership checks."""
    if game_id is None or isinstance(game_id, bool):
        raise ValueError(f"Invalid wishlist id: {game_id!r}")
    if isinstance(game_id, float) and game_id.is_integer():
        game_id = int(game_id)
    return str(game_id)


@dataclass(frozen=True)
class WishlistEntry:
    """One saved game reference.

    ``extra`` holds stored keys this version does not know about; they are
    written back verbatim so newer data survives a round trip through an
    older reader.
    """

    id: str
    name: str = ''
    cover_image_id: Optional[str] = None
    url: Optional[str] = None
    added_at: Optional[Any] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, 'id', normalise_id(self.id))
        # Same shape rules as from_dict.
        if not isinstance(self.name, str):
            raise ValueError(f"Entry {self.id!r} name must be a string")
        for key, value in (('cover_image_id', self.cover_image_id), ('url', self.url)):
            if value is not None and not isinstance(value, str):
                raise ValueError(f"Entry {self.id!r} {key} must be a string or None")
        if self.added_at is not None and (
                isinstance(self.added_at, bool)
                or not isinstance(self.added_at, (str, int, float))):
            raise ValueError(f"Entry {self.id!r} added_at must be a timestamp or None")

    def with_added_at(self, stamp: Any) -> 'WishlistEntry':
        return replace(self, added_at=stamp)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'id': self.id,
            'name': self.name,
            'cover': self.cover_image_id,
            'url': self.url,
            'addedAt': self.added_at,
        }
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> 'WishlistEntry':
        """Build an entry from its stored form.

        Raises:
            DeserializationFailure: If *data* does not have the stored shape.
        """
        if not isinstance(data, dict):
            raise DeserializationFailure(f"Expected an object, got {type(data).__name__}")
        raw_id = data.get('id')
        if raw_id is None or isinstance(raw_id, bool) or not isinstance(raw_id, (str, int, float)):
            raise DeserializationFailure(f"Entry has no usable id: {raw_id!r}")

        name = data.get('name')
        if name is None:
            name = ''
        if not isinstance(name, str):
            raise DeserializationFailure(f"Entry {raw_id!r} has a non-string name")

        cover = data.get('cover')
        if isinstance(cover, int) and not isinstance(cover, bool):
            cover = str(cover)
        _expect_optional(raw_id, 'cover', cover, (str,))
        _expect_optional(raw_id, 'url', data.get('url'), (str,))
        _expect_optional(raw_id, 'addedAt', data.get('addedAt'), (str, int, float))

        return cls(
            id=raw_id,
            name=name,
            cover_image_id=cover,
            url=data.get('url'),
            added_at=data.get('addedAt'),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )

    @classmethod
    def coerce(cls, value: Any) -> 'WishlistEntry':
        """Return *value* as an entry; dicts may be stored entries or game records."""
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            return entry_from_game(value)
        raise ValueError(f"Cannot build a wishlist entry from {type(value).__name__}")


def _expect_optional(entry_id, key: str, value, types: tuple) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, types):
        raise DeserializationFailure(
            f"Entry {entry_id!r} has an invalid '{key}' value: {value!r}")


def entry_from_game(record: Dict[str, Any]) -> WishlistEntry:
    """Convert a game-catalogue record into a wishlist entry.

    The catalogue nests the cover as ``{"cover": {"image_id": "co1x2y"}}``;
    an already-flattened ``"cover": "co1x2y"`` is accepted too.  Stored
    ``addedAt`` values are kept; ``None`` means "stamp on insert".  Every
    other key of the record (``rating``, ``release_dates``, ...) is kept in
    ``extra`` and stored with the entry.
    """
    if 'id' not in record:
        raise ValueError("Game record has no 'id'")
    cover = record.get('cover')
    if isinstance(cover, dict):
        cover = cover.get('image_id')
    return WishlistEntry(
        id=record['id'],
        name=str(record.get('name') or ''),
        cover_image_id=str(cover) if cover is not None else None,
        url=record.get('url'),
        added_at=record.get('addedAt'),
        extra={k: v for k, v in record.items() if k not in _KNOWN_KEYS},
    )


def cover_url(entry: WishlistEntry, size: str = 't_cover_big') -> Optional[str]:
    """Return the catalogue image URL for *entry*'s cover, or ``None``."""
    if not entry.cover_image_id:
        return None
    return IGDB_IMAGE_URL.format(size=size, image_id=entry.cover_image_id)


def parse_collection(raw: Optional[str]) -> List[WishlistEntry]:
    """Decode a stored collection.

    Duplicate ids keep their first occurrence.

    Raises:
        DeserializationFailure: On invalid JSON or a mis-shaped document.
    """
    if raw is None or not raw.strip():
        return []
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as exc:
        raise DeserializationFailure(f"Stored wishlist is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise DeserializationFailure(
            f"Stored wishlist must be a JSON array, got {type(data).__name__}")

    entries: List[WishlistEntry] = []
    seen = set()
    for item in data:
        entry = WishlistEntry.from_dict(item)
        if entry.id in seen:
            continue
        seen.add(entry.id)
        entries.append(entry)
    return entries


def dump_collection(entries: Iterable[WishlistEntry]) -> str:
    """Encode *entries* as the stored JSON array."""
    return json.dumps([e.to_dict() for e in entries], separators=(',', ':'))
