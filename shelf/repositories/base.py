"""Repository base class used by all concrete repositories."""
import json
import logging
import os
import tempfile
from typing import Any

from ..errors import StorageError


class BaseRepository:
    """Provides JSON-backed persistence for a single data file.

    Unlike a cache, a repository here never keeps a copy of the data between
    calls: sub-classes call :meth:`_read` at the start of every operation and
    :meth:`_write` to persist the whole document back.

    The write uses a write-then-rename strategy so the file is never left in
    a partially-written state.  Every I/O or decoding failure surfaces as
    :class:`~shelf.errors.StorageError`.
    """

    def __init__(self, file_path: str) -> None:
        self._path = file_path
        self._log = logging.getLogger(f'gameshelf.repository.{type(self).__name__}')

    @property
    def path(self) -> str:
        return self._path

    def exists(self) -> bool:
        return os.path.isfile(self._path)

    def _read(self) -> Any:
        """Load and return the JSON document stored at *self._path*."""
        try:
            with open(self._path, 'r', encoding='utf-8') as fh:
                return json.load(fh)
        except ValueError as exc:
            # JSONDecodeError, UnicodeDecodeError and oversized int literals
            self._log.warning("Malformed document %s: %s", self._path, exc)
            raise StorageError(self._path, f"malformed document ({exc})") from exc
        except OSError as exc:
            self._log.warning("Could not read %s: %s", self._path, exc)
            raise StorageError(self._path, f"could not read ({exc.strerror or exc})") from exc

    def _write(self, data: Any) -> None:
        """Atomically write *data* as JSON to *self._path*."""
        dir_name = os.path.dirname(os.path.abspath(self._path))
        try:
            fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix='.tmp')
        except OSError as exc:
            self._log.warning("Could not write %s: %s", self._path, exc)
            raise StorageError(self._path, f"could not write ({exc.strerror or exc})") from exc
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp_path, self._path)
        except (OSError, TypeError, ValueError) as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            self._log.warning("Could not write %s: %s", self._path, exc)
            raise StorageError(self._path, f"could not write ({exc})") from exc
