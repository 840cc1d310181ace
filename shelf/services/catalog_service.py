"""Business logic for the game catalog: add, remove, list and price queries."""
import logging
import math
from typing import Dict, Iterator, NamedTuple, Optional

from ..repositories.catalog_repository import CatalogRepository, make_record

STATUS_OK = 'ok'
STATUS_INVALID_INPUT = 'invalid_input'
STATUS_NOT_FOUND = 'not_found'
STATUS_EMPTY_CATALOG = 'empty_catalog'

STATUSES = (STATUS_OK, STATUS_INVALID_INPUT, STATUS_NOT_FOUND, STATUS_EMPTY_CATALOG)


class OperationResult(NamedTuple):
    """Outcome of a catalog operation.

    ``record`` is the record that was added, removed or selected, and
    ``None`` for every status other than :data:`STATUS_OK`.
    """

    status: str
    record: Optional[Dict] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK


def parse_price(text) -> Optional[float]:
    """Convert user-supplied price text to a float.

    Returns ``None`` when *text* is not a number or is not finite
    (``nan``/``inf`` cannot be ordered or stored).  Negative prices are
    accepted.
    """
    try:
        value = float(text)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


class CatalogService:
    """Manages the game catalog, delegating persistence to
    :class:`~shelf.repositories.catalog_repository.CatalogRepository`.

    Every call loads the full catalog from disk; mutating calls write the
    full catalog back, read-only calls never write.

    Rules
    -----
    * ``price`` arrives as text and must parse as a finite float; otherwise
      the call returns :data:`STATUS_INVALID_INPUT` and nothing is written.
    * Duplicate names are allowed.  :meth:`remove` deletes only the first
      record whose name matches exactly (case-sensitive).
    * :meth:`most_expensive` / :meth:`cheapest` return the first record at
      the extreme price, in stored order.

    :class:`~shelf.errors.StorageError` from the repository propagates
    unchanged.
    """

    def __init__(self, repository: CatalogRepository) -> None:
        self._repo = repository
        self._log = logging.getLogger('gameshelf.catalog')

    @property
    def path(self) -> str:
        return self._repo.path

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def initialize(self) -> bool:
        """Create an empty catalog file if none exists.

        Returns:
            ``True`` if the file was created, ``False`` if it already existed.
        """
        if self._repo.exists():
            return False
        self._repo.create()
        self._log.info("Created empty catalog at %s", self._repo.path)
        return True

    def add(self, name: str, genre: str, price_text) -> OperationResult:
        """Append a new record to the end of the catalog."""
        price = parse_price(price_text)
        if price is None:
            self._log.info("Rejected price %r for %r", price_text, name)
            return OperationResult(STATUS_INVALID_INPUT)
        records = self._repo.load()
        record = make_record(name, genre, price)
        records.append(record)
        self._repo.save(records)
        self._log.info("Added %r (%d entries)", name, len(records))
        return OperationResult(STATUS_OK, record)

    def remove(self, name: str) -> OperationResult:
        """Remove the first record named exactly *name*."""
        records = self._repo.load()
        for index, record in enumerate(records):
            if record['name'] == name:
                del records[index]
                self._repo.save(records)
                self._log.info("Removed %r (%d entries left)", name, len(records))
                return OperationResult(STATUS_OK, record)
        return OperationResult(STATUS_NOT_FOUND)

    def find(self, name: str) -> Optional[Dict]:
        """Return the first record named exactly *name*, or ``None``."""
        return next((r for r in self._repo.load() if r['name'] == name), None)

    def iter_records(self) -> Iterator[Dict]:
        """Return an iterator over the stored records, in order.

        The file is read when this is called, not when iteration starts, so
        storage errors surface here.
        """
        return iter(self._repo.load())

    def count(self) -> int:
        return len(self._repo.load())

    def most_expensive(self) -> OperationResult:
        """Return the record with the highest price."""
        records = self._repo.load()
        if not records:
            return OperationResult(STATUS_EMPTY_CATALOG)
        # max() keeps the first of equal keys
        return OperationResult(STATUS_OK, max(records, key=lambda r: r['price']))

    def cheapest(self) -> OperationResult:
        """Return the record with the lowest price."""
        records = self._repo.load()
        if not records:
            return OperationResult(STATUS_EMPTY_CATALOG)
        return OperationResult(STATUS_OK, min(records, key=lambda r: r['price']))
