"""Import and export of the ``games.xml`` layout used by the first console release.

That release kept its catalog as::

    <GameList>
      <Game>
        <Name>Chess</Name>
        <Genre>Strategy</Genre>
        <Price>9.99</Price>
      </Game>
    </GameList>
"""
import logging
import os
import re
import tempfile
import xml.etree.ElementTree as ET
from typing import Dict

from ..errors import StorageError
from ..repositories.catalog_repository import CatalogRepository, make_record
from .catalog_service import parse_price

ROOT_TAG = 'GameList'
GAME_TAG = 'Game'

# Characters XML 1.0 cannot carry, not even as character references.
_XML_ILLEGAL = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


class LegacyXmlService:
    """Moves records between the JSON catalog and the legacy XML layout."""

    def __init__(self, repository: CatalogRepository) -> None:
        self._repo = repository
        self._log = logging.getLogger('gameshelf.legacy')

    def import_from(self, xml_path: str) -> Dict[str, int]:
        """Append every ``Game`` element of *xml_path* to the catalog.

        Games whose ``Price`` is missing or not a finite number are skipped.
        The catalog is written once, and only if something was imported.

        Returns:
            ``{'imported': <int>, 'skipped': <int>}``

        Raises:
            StorageError: *xml_path* is missing, malformed or not a
                ``GameList`` document, or the catalog cannot be read/written.
        """
        try:
            root = ET.parse(xml_path).getroot()
        except ET.ParseError as exc:
            raise StorageError(xml_path, f"malformed XML ({exc})") from exc
        except OSError as exc:
            raise StorageError(xml_path, f"could not read ({exc.strerror or exc})") from exc
        if root.tag != ROOT_TAG:
            raise StorageError(xml_path, f"expected <{ROOT_TAG}> root, found <{root.tag}>")

        new_records = []
        skipped = 0
        for game in root.findall(GAME_TAG):
            name = game.findtext('Name', default='')
            price = parse_price(game.findtext('Price'))
            if price is None:
                self._log.warning("Skipping %r from %s: bad price", name, xml_path)
                skipped += 1
                continue
            new_records.append(make_record(name, game.findtext('Genre', default=''), price))

        if new_records:
            records = self._repo.load()
            records.extend(new_records)
            self._repo.save(records)
        self._log.info("Imported %d games from %s (%d skipped)",
                       len(new_records), xml_path, skipped)
        return {'imported': len(new_records), 'skipped': skipped}

    def export(self, xml_path: str) -> int:
        """Write the current catalog to *xml_path* in the legacy layout.

        Returns:
            Number of games written.
        """
        records = self._repo.load()
        root = ET.Element(ROOT_TAG)
        for index, record in enumerate(records):
            for field in ('name', 'genre'):
                if _XML_ILLEGAL.search(record[field]):
                    raise StorageError(
                        xml_path, f"entry {index} has a {field} that cannot be stored in XML")
            game = ET.SubElement(root, GAME_TAG)
            ET.SubElement(game, 'Name').text = record['name']
            ET.SubElement(game, 'Genre').text = record['genre']
            ET.SubElement(game, 'Price').text = repr(record['price'])
        ET.indent(root)
        # The parser folds a raw CR into LF; a reference survives the round trip.
        data = ET.tostring(root, encoding='utf-8', xml_declaration=True).replace(b'\r', b'&#13;')

        dir_name = os.path.dirname(os.path.abspath(xml_path))
        try:
            fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix='.tmp')
        except OSError as exc:
            raise StorageError(xml_path, f"could not write ({exc.strerror or exc})") from exc
        try:
            with os.fdopen(fd, 'wb') as fh:
                fh.write(data)
            os.replace(tmp_path, xml_path)
        except OSError as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise StorageError(xml_path, f"could not write ({exc.strerror or exc})") from exc
        self._log.info("Exported %d games to %s", len(records), xml_path)
        return len(records)
