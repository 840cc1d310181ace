"""Repository for the game catalog ({"catalog": {"entries": [record, ...]}})."""
import math
from typing import Any, Dict, List

from ..errors import StorageError
from .base import BaseRepository

RECORD_FIELDS = ('name', 'genre', 'price')


def make_record(name: str, genre: str, price: float) -> Dict:
    """Build a catalog record with the canonical field order."""
    return {'name': name, 'genre': genre, 'price': float(price)}


class CatalogRepository(BaseRepository):
    """Persists the ordered game catalog to a JSON file.

    Schema::

        {
            "catalog": {
                "entries": [
                    {"name": "<str>", "genre": "<str>", "price": <float>},
                    ...
                ]
            }
        }

    Entry order is insertion order and is preserved across save/load.
    Nothing is cached: :meth:`load` re-reads the file on every call.
    """

    def __init__(self, file_path: str = 'games.json') -> None:
        super().__init__(file_path)

    def create(self) -> None:
        """Write an empty catalog, replacing whatever is at the path."""
        self.save([])

    def load(self) -> List[Dict]:
        """Return every stored record, in order.

        Raises:
            StorageError: the file is missing, unreadable or not a catalog.
        """
        doc = self._read()
        if not isinstance(doc, dict) or not isinstance(doc.get('catalog'), dict):
            raise StorageError(self._path, "missing 'catalog' node")
        entries = doc['catalog'].get('entries')
        if not isinstance(entries, list):
            raise StorageError(self._path, "missing 'entries' list")
        return [self._parse_entry(i, raw) for i, raw in enumerate(entries)]

    def save(self, records: List[Dict]) -> None:
        """Rewrite the whole catalog with *records*."""
        entries = [make_record(r['name'], r['genre'], r['price']) for r in records]
        self._write({'catalog': {'entries': entries}})
        self._log.debug("Saved %d entries to %s", len(entries), self._path)

    def _parse_entry(self, index: int, raw: Any) -> Dict:
        if not isinstance(raw, dict):
            raise StorageError(self._path, f"entry {index} is not an object")
        missing = [f for f in RECORD_FIELDS if f not in raw]
        if missing:
            raise StorageError(
                self._path, f"entry {index} is missing {', '.join(missing)}")
        name, genre, price = raw['name'], raw['genre'], raw['price']
        if not isinstance(name, str) or not isinstance(genre, str):
            raise StorageError(self._path, f"entry {index} has a non-text name or genre")
        # bool is an int subclass; a JSON true/false is not a price
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            raise StorageError(self._path, f"entry {index} has an invalid price")
        try:
            price = float(price)
        except OverflowError as exc:
            raise StorageError(self._path, f"entry {index} has an invalid price") from exc
        if not math.isfinite(price):
            raise StorageError(self._path, f"entry {index} has an invalid price")
        return make_record(name, genre, price)
