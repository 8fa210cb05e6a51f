"""Station catalog sources."""

from now_departing.adapters.catalog.catalog_document import decode_catalog, encode_catalog
from now_departing.adapters.catalog.json_file_catalog_source import (
    JsonFileCatalogSource,
    bundled_catalog_source,
)
from now_departing.adapters.catalog.remote_catalog_source import RemoteCatalogSource

__all__ = [
    "JsonFileCatalogSource",
    "RemoteCatalogSource",
    "bundled_catalog_source",
    "decode_catalog",
    "encode_catalog",
]
