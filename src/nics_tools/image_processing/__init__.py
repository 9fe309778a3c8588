"""Image metadata reading: EXIF, GPS and file system tags."""

from .geo import GeoLocation
from .metadata import (
    Directory,
    ExifIFD0Directory,
    ExifSubIFDDirectory,
    FileSystemDirectory,
    FileTypeDirectory,
    GpsDirectory,
    ImageHeaderDirectory,
    Metadata,
    Tag,
)
from .processor import get_date, get_location, print_all_tags, read_metadata, read_metadata_batch

__all__ = [
    "Directory",
    "ExifIFD0Directory",
    "ExifSubIFDDirectory",
    "FileSystemDirectory",
    "FileTypeDirectory",
    "GeoLocation",
    "GpsDirectory",
    "ImageHeaderDirectory",
    "Metadata",
    "Tag",
    "get_date",
    "get_location",
    "print_all_tags",
    "read_metadata",
    "read_metadata_batch",
]
