"""
GameShelf application package.

Layered the same way throughout:

  shelf/repositories/  — pure I/O: loading from and persisting to the catalog file.
  shelf/services/      — business logic: price parsing, lookups, extremal queries,
                         legacy XML interchange.
  shelf/audio.py       — optional feedback cues and background music.

``GameShelf`` (in ``gameshelf.py``) is the integration point: it builds the
repository and services from the loaded config and runs the console menu on
top of ``shelf.services.CatalogService``.  The services never print or play
sounds; they return :class:`~shelf.services.catalog_service.OperationResult`
values that the console layer turns into messages and cues.
"""
