"""Services package — expose all concrete services from one import."""
from .catalog_service import (
    CatalogService,
    OperationResult,
    STATUS_OK,
    STATUS_INVALID_INPUT,
    STATUS_NOT_FOUND,
    STATUS_EMPTY_CATALOG,
    parse_price,
)
from .legacy_xml_service import LegacyXmlService

__all__ = [
    'CatalogService',
    'LegacyXmlService',
    'OperationResult',
    'STATUS_OK',
    'STATUS_INVALID_INPUT',
    'STATUS_NOT_FOUND',
    'STATUS_EMPTY_CATALOG',
    'parse_price',
]
