"""Pillow-backed decoder that turns an image file into a ``Metadata`` tree.

Pillow does the actual parsing; this module only walks the structures it
exposes (decoder header, EXIF IFD0, EXIF sub-IFD, GPS IFD) and the file's
``stat`` result, and renders every value as a human-readable description.

Errors raised by Pillow while opening the file propagate unchanged. Errors
hit while decoding a single IFD are recorded on that directory instead, so
the other directories of a partly damaged file are still returned.
"""

import logging
import re
import struct
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from PIL import ExifTags, Image
from PIL.TiffImagePlugin import IFDRational

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

logger = logging.getLogger(__name__)

DATE_FORMAT = "%a %b %d %H:%M:%S %z %Y"

# Pointer tags are structure, not content; their IFDs become directories.
_IFD_POINTERS = frozenset({ExifTags.IFD.Exif, ExifTags.IFD.GPSInfo, ExifTags.IFD.Interop})

_GPS_DMS_TAGS = frozenset({GpsDirectory.TAG_LATITUDE, GpsDirectory.TAG_LONGITUDE})

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

_IFD_DECODE_ERRORS = (
    SyntaxError,
    ValueError,
    KeyError,
    IndexError,
    TypeError,
    ZeroDivisionError,
    struct.error,
    OSError,
)


def read_image_metadata(filepath: str | Path) -> Metadata:
    """Decode every supported directory from ``filepath``.

    Raises:
        FileNotFoundError: If the file does not exist
        PIL.UnidentifiedImageError: If Pillow cannot recognise the format
        OSError: For any other failure opening or reading the file
    """
    path = Path(filepath)
    metadata = Metadata()

    with Image.open(path) as img:
        metadata.add_directory(_header_directory(img))
        _add_exif_directories(metadata, img)
        metadata.add_directory(_file_type_directory(img, path))

    metadata.add_directory(_file_system_directory(path))
    logger.debug(f"Read {metadata.directory_count} directories from {path}")
    return metadata


# ============================================================================
# Directory builders
# ============================================================================


def _header_directory(img: Image.Image) -> ImageHeaderDirectory:
    directory = ImageHeaderDirectory(name=img.format or "Image")
    width, height = img.size
    _set(directory, ImageHeaderDirectory.TAG_IMAGE_WIDTH, "Image Width", width, f"{width} pixels")
    _set(directory, ImageHeaderDirectory.TAG_IMAGE_HEIGHT, "Image Height", height, f"{height} pixels")
    _set(directory, ImageHeaderDirectory.TAG_COLOR_MODE, "Color Mode", img.mode, img.mode)
    frames = getattr(img, "n_frames", 1)
    _set(directory, ImageHeaderDirectory.TAG_FRAME_COUNT, "Number of Frames", frames, str(frames))
    return directory


def _add_exif_directories(metadata: Metadata, img: Image.Image) -> None:
    try:
        exif = img.getexif()
    except _IFD_DECODE_ERRORS as exc:
        directory = ExifIFD0Directory()
        directory.add_error(f"Unable to read EXIF data: {exc}")
        logger.warning(f"Unable to read EXIF data from {img.filename}: {exc}")
        metadata.add_directory(directory)
        return

    if not exif:
        return

    ifd0 = ExifIFD0Directory()
    try:
        _fill(ifd0, exif, ExifTags.TAGS)
    except _IFD_DECODE_ERRORS as exc:
        _record_decode_error(ifd0, exc)
    metadata.add_directory(ifd0)

    if ExifTags.IFD.Exif in exif:
        metadata.add_directory(_sub_ifd(exif, ExifTags.IFD.Exif, ExifSubIFDDirectory(), ExifTags.TAGS))

    if ExifTags.IFD.GPSInfo in exif:
        metadata.add_directory(_sub_ifd(exif, ExifTags.IFD.GPSInfo, GpsDirectory(), ExifTags.GPSTAGS))


def _sub_ifd(
    exif: Image.Exif,
    pointer: int,
    directory: Directory,
    names: Mapping[int, str],
) -> Directory:
    try:
        _fill(directory, exif.get_ifd(pointer), names)
    except _IFD_DECODE_ERRORS as exc:
        _record_decode_error(directory, exc)
    return directory


def _record_decode_error(directory: Directory, exc: Exception) -> None:
    message = f"Unable to decode {directory.name} directory: {exc}"
    logger.warning(message)
    directory.add_error(message)


def _fill(directory: Directory, entries: Mapping[int, Any], names: Mapping[int, str]) -> None:
    is_gps = isinstance(directory, GpsDirectory)
    for tag_type, value in entries.items():
        if tag_type in _IFD_POINTERS:
            continue
        if is_gps and tag_type in _GPS_DMS_TAGS:
            description = describe_dms(value)
        else:
            description = describe(value)
        directory.set_tag(Tag(tag_type, tag_name(tag_type, names), value, description))


def _file_type_directory(img: Image.Image, path: Path) -> FileTypeDirectory:
    directory = FileTypeDirectory()
    fmt = img.format
    if not fmt:
        directory.add_error("Decoder did not report a file format")
        return directory

    _set(directory, FileTypeDirectory.TAG_DETECTED_FILE_TYPE_NAME, "Detected File Type Name", fmt, fmt)
    long_name = img.format_description or fmt
    _set(
        directory,
        FileTypeDirectory.TAG_DETECTED_FILE_TYPE_LONG_NAME,
        "Detected File Type Long Name",
        long_name,
        long_name,
    )

    mime = Image.MIME.get(fmt)
    if mime:
        _set(directory, FileTypeDirectory.TAG_DETECTED_FILE_MIME_TYPE, "Detected MIME Type", mime, mime)

    extension = expected_extension(fmt, path)
    if extension:
        _set(
            directory,
            FileTypeDirectory.TAG_EXPECTED_FILE_NAME_EXTENSION,
            "Expected File Name Extension",
            extension,
            extension,
        )
    return directory


def _file_system_directory(path: Path) -> FileSystemDirectory:
    directory = FileSystemDirectory()
    stat = path.stat()
    modified = datetime.fromtimestamp(stat.st_mtime).astimezone()

    _set(directory, FileSystemDirectory.TAG_FILE_NAME, "File Name", path.name, path.name)
    _set(directory, FileSystemDirectory.TAG_FILE_SIZE, "File Size", stat.st_size, f"{stat.st_size} bytes")
    _set(
        directory,
        FileSystemDirectory.TAG_FILE_MODIFIED_DATE,
        "File Modified Date",
        modified,
        describe(modified),
    )
    return directory


def _set(directory: Directory, tag_type: int, name: str, value: Any, description: str) -> None:
    directory.set_tag(Tag(tag_type, name, value, description))


# ============================================================================
# Naming and description helpers
# ============================================================================


def tag_name(tag_type: int, names: Mapping[int, str]) -> str:
    """Spaced display name for a tag id, e.g. ``GPSLatitudeRef`` -> ``GPS Latitude Ref``."""
    raw = names.get(tag_type)
    if raw is None:
        return f"Unknown tag (0x{tag_type:04x})"
    return _WORD_BOUNDARY.sub(" ", raw)


def expected_extension(fmt: str, path: Path | None = None) -> str | None:
    extensions = [ext for ext, owner in Image.registered_extensions().items() if owner == fmt]
    if not extensions:
        return None
    suffix = path.suffix.lower() if path is not None else ""
    chosen = suffix if suffix in extensions else extensions[0]
    return chosen.lstrip(".")


def describe(value: Any) -> str:
    """Render a decoded tag value as text."""
    if isinstance(value, IFDRational):
        return _describe_rational(value)
    if isinstance(value, datetime):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, bytes):
        return _describe_bytes(value)
    if isinstance(value, str):
        return value.strip("\x00").strip()
    if isinstance(value, (tuple, list)):
        return ", ".join(describe(item) for item in value)
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def describe_dms(value: Any) -> str:
    """Render a GPS degrees/minutes/seconds triple as ``D° M' S"``."""
    try:
        degrees, minutes, seconds = (float(part) for part in value)
    except (TypeError, ValueError, ZeroDivisionError):
        return describe(value)
    return f"{degrees:g}° {minutes:g}' {seconds:g}\""


def _describe_rational(value: IFDRational) -> str:
    if value.denominator == 0:
        return "NaN"
    if value.denominator == 1:
        return str(value.numerator)
    if value.numerator == 1:
        return f"1/{value.denominator}"
    return f"{float(value):g}"


def _describe_bytes(value: bytes) -> str:
    text = value.rstrip(b"\x00")
    if text and all(32 <= b < 127 for b in text):
        return text.decode("ascii").strip()
    if len(value) <= 16:
        return " ".join(str(b) for b in value)
    return f"[{len(value)} bytes]"
