"""nics_tools - database connection and image metadata utilities."""

from .db import DbSettings, closing_connection, get_connection
from .errors import (
    DbConnectionError,
    DbError,
    DriverUnavailableError,
    ImageProcessingError,
    MetadataIOError,
    MetadataReadError,
    NicsToolsError,
)
from .image_processing import (
    GeoLocation,
    Metadata,
    get_date,
    get_location,
    print_all_tags,
    read_metadata,
    read_metadata_batch,
)

__version__ = "0.1.0"

__all__ = [
    "DbConnectionError",
    "DbError",
    "DbSettings",
    "DriverUnavailableError",
    "GeoLocation",
    "ImageProcessingError",
    "Metadata",
    "MetadataIOError",
    "MetadataReadError",
    "NicsToolsError",
    "__version__",
    "closing_connection",
    "get_connection",
    "get_date",
    "get_location",
    "print_all_tags",
    "read_metadata",
    "read_metadata_batch",
]
