"""Read image metadata and query it for location, date and a tag dump.

Every function here is stateless. Single-file reads raise
``MetadataReadError``; batch and path-convenience helpers log failures and
return ``None`` for the affected file instead.
"""

import logging
import os
import struct
from collections.abc import Sequence
from datetime import datetime
from typing import TypeAlias, cast

from PIL import Image, UnidentifiedImageError

from ..errors import ImageProcessingError, MetadataIOError, MetadataReadError
from .geo import GeoLocation
from .metadata import FileSystemDirectory, GpsDirectory, Metadata
from .reader import read_image_metadata

logger = logging.getLogger(__name__)

ImagePath: TypeAlias = str | os.PathLike[str]
MetadataSource: TypeAlias = Metadata | ImagePath | None

NULL_METADATA_NOTICE = "Metadata was null. Nothing to print."

# Failures Pillow raises from inside its decoders on malformed input.
_DECODE_ERRORS = (
    SyntaxError,
    ValueError,
    EOFError,
    struct.error,
    IndexError,
    TypeError,
    KeyError,
    ZeroDivisionError,
    Image.DecompressionBombError,
)


def read_metadata(image_path: ImagePath) -> Metadata:
    """Read metadata from a single image file.

    Args:
        image_path: Path to the image file

    Returns:
        Metadata decoded from the file

    Raises:
        ImageProcessingError: If the file cannot be decoded as an image
        MetadataIOError: If the file cannot be opened or read
    """
    path = os.fspath(image_path)

    try:
        return read_image_metadata(path)

    except UnidentifiedImageError as exc:
        logger.debug(f"Unable to decode {path}: {exc}")
        raise ImageProcessingError(path, str(exc)) from exc

    except OSError as exc:
        logger.debug(f"Unable to read {path}: {exc}")
        raise MetadataIOError(path, str(exc)) from exc

    except _DECODE_ERRORS as exc:
        logger.debug(f"Unable to decode {path}: {exc!r}")
        raise ImageProcessingError(path, str(exc) or type(exc).__name__) from exc


def read_metadata_batch(
    image_paths: Sequence[ImagePath] | None,
) -> dict[str, Metadata | None] | None:
    """Read metadata from several files, isolating per-file failures.

    Returns:
        None if ``image_paths`` is None or empty. Otherwise a dict keyed by
        each input path; a file that failed maps to None. Duplicate paths
        keep the result of the last read.

    Raises:
        TypeError: If a single path is passed instead of a sequence of paths
    """
    if isinstance(image_paths, (str, bytes, os.PathLike)):
        raise TypeError(f"Expected a sequence of paths, got a single path: {image_paths!r}")

    if not image_paths:
        return None

    results: dict[str, Metadata | None] = {}

    for image_path in image_paths:
        key = os.fspath(image_path)
        metadata: Metadata | None = None
        try:
            metadata = read_metadata(key)
        except MetadataReadError as exc:
            logger.error(f"Skipping {key}: {exc}")
        except Exception as exc:
            logger.exception(f"Unexpected error reading {key}: {exc}")

        results[key] = metadata

    failed = sum(1 for value in results.values() if value is None)
    if failed:
        logger.warning(f"Partial success: {len(results) - failed}/{len(results)} files read")

    return results


def get_location(source: MetadataSource) -> GeoLocation | None:
    """Return the coordinate held by the first GPS directory, if any.

    ``source`` may be a Metadata object or a path to read first. Additional
    GPS directories are not consulted.
    """
    metadata = _resolve(source)
    if metadata is None:
        return None

    gps = metadata.get_first_directory_of_type(GpsDirectory)
    if gps is None:
        return None

    return gps.get_geo_location()


def get_date(source: MetadataSource) -> datetime | None:
    """Return the file's last-modified date from the first file system directory.

    Date tags in EXIF or other directories are not consulted.
    """
    metadata = _resolve(source)
    if metadata is None:
        return None

    file_dir = metadata.get_first_directory_of_type(FileSystemDirectory)
    if file_dir is None:
        return None

    return file_dir.get_date(FileSystemDirectory.TAG_FILE_MODIFIED_DATE)


def print_all_tags(source: MetadataSource) -> None:
    """Print every directory and tag description to stdout."""
    if _is_path(source):
        metadata = _read_or_none(source)
        if metadata is None:
            return
    else:
        metadata = cast(Metadata | None, source)

    if metadata is None:
        print(NULL_METADATA_NOTICE)
        return

    for directory in metadata.directories:
        print(f"Directory: {directory.name}")
        for tag in directory.tags:
            print(f"\tTag: {tag.name}, Value: {tag.description}")
        for error in directory.errors:
            print(f"\tError: {error}")


def _is_path(source: object) -> bool:
    return isinstance(source, (str, os.PathLike))


def _resolve(source: MetadataSource) -> Metadata | None:
    if _is_path(source):
        return _read_or_none(source)
    return cast(Metadata | None, source)


def _read_or_none(image_path: ImagePath) -> Metadata | None:
    try:
        return read_metadata(image_path)
    except MetadataReadError as exc:
        logger.error(f"Could not read metadata: {exc}")
    except Exception as exc:
        logger.exception(f"Could not read metadata from {os.fspath(image_path)}: {exc}")
    return None
