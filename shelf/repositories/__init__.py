"""Repository package — expose all concrete repositories from one import."""
from .catalog_repository import CatalogRepository, make_record

__all__ = [
    'CatalogRepository',
    'make_record',
]
