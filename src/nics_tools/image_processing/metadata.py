"""In-memory metadata model: directories of tags read from one image file.

A ``Metadata`` object is an ordered list of ``Directory`` instances. Each
directory groups related tags (EXIF IFD0, GPS, file system, ...) and keeps
any errors hit while decoding that group, so a partly damaged file still
yields the directories that could be read.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, TypeVar

from .geo import GeoLocation

D = TypeVar("D", bound="Directory")


@dataclass(frozen=True)
class Tag:
    """A single decoded field of a directory."""

    tag_type: int
    name: str
    value: Any
    description: str

    def __str__(self) -> str:
        return f"{self.name}: {self.description}"


@dataclass
class Directory:
    """Named group of tags, in the order the decoder produced them."""

    NAME: ClassVar[str] = "Unknown"

    name: str = ""
    _tags: dict[int, Tag] = field(default_factory=dict, repr=False)
    errors: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.NAME

    @property
    def tags(self) -> list[Tag]:
        return list(self._tags.values())

    @property
    def tag_count(self) -> int:
        return len(self._tags)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def set_tag(self, tag: Tag) -> None:
        self._tags[tag.tag_type] = tag

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def contains_tag(self, tag_type: int) -> bool:
        return tag_type in self._tags

    def get_tag(self, tag_type: int) -> Tag | None:
        return self._tags.get(tag_type)

    def get_object(self, tag_type: int) -> Any:
        tag = self._tags.get(tag_type)
        return tag.value if tag is not None else None

    def get_description(self, tag_type: int) -> str | None:
        tag = self._tags.get(tag_type)
        return tag.description if tag is not None else None

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._tags.values())

    def __len__(self) -> int:
        return len(self._tags)


class ImageHeaderDirectory(Directory):
    """Dimensions and colour mode reported by the image decoder."""

    TAG_IMAGE_WIDTH: ClassVar[int] = 1
    TAG_IMAGE_HEIGHT: ClassVar[int] = 2
    TAG_COLOR_MODE: ClassVar[int] = 3
    TAG_FRAME_COUNT: ClassVar[int] = 4


class ExifIFD0Directory(Directory):
    NAME: ClassVar[str] = "Exif IFD0"


class ExifSubIFDDirectory(Directory):
    NAME: ClassVar[str] = "Exif SubIFD"


class GpsDirectory(Directory):
    NAME: ClassVar[str] = "GPS"

    TAG_LATITUDE_REF: ClassVar[int] = 0x0001
    TAG_LATITUDE: ClassVar[int] = 0x0002
    TAG_LONGITUDE_REF: ClassVar[int] = 0x0003
    TAG_LONGITUDE: ClassVar[int] = 0x0004
    TAG_ALTITUDE_REF: ClassVar[int] = 0x0005
    TAG_ALTITUDE: ClassVar[int] = 0x0006

    def get_geo_location(self) -> GeoLocation | None:
        """Resolve latitude/longitude from the DMS triples and their references.

        Returns None when any of the four tags is missing or malformed, or
        when the result is outside the valid coordinate range.
        """
        latitude = _dms_to_decimal(
            self.get_object(self.TAG_LATITUDE), self.get_object(self.TAG_LATITUDE_REF)
        )
        longitude = _dms_to_decimal(
            self.get_object(self.TAG_LONGITUDE), self.get_object(self.TAG_LONGITUDE_REF)
        )
        if latitude is None or longitude is None:
            return None
        if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
            return None
        return GeoLocation(latitude=latitude, longitude=longitude)


class FileTypeDirectory(Directory):
    NAME: ClassVar[str] = "File Type"

    TAG_DETECTED_FILE_TYPE_NAME: ClassVar[int] = 1
    TAG_DETECTED_FILE_TYPE_LONG_NAME: ClassVar[int] = 2
    TAG_DETECTED_FILE_MIME_TYPE: ClassVar[int] = 3
    TAG_EXPECTED_FILE_NAME_EXTENSION: ClassVar[int] = 4


class FileSystemDirectory(Directory):
    NAME: ClassVar[str] = "File"

    TAG_FILE_NAME: ClassVar[int] = 1
    TAG_FILE_SIZE: ClassVar[int] = 2
    TAG_FILE_MODIFIED_DATE: ClassVar[int] = 3

    def get_date(self, tag_type: int) -> datetime | None:
        value = self.get_object(tag_type)
        return value if isinstance(value, datetime) else None


@dataclass
class Metadata:
    """All directories decoded from a single file."""

    directories: list[Directory] = field(default_factory=list)

    def add_directory(self, directory: Directory) -> None:
        self.directories.append(directory)

    def get_directories_of_type(self, directory_type: type[D]) -> list[D]:
        return [d for d in self.directories if isinstance(d, directory_type)]

    def get_first_directory_of_type(self, directory_type: type[D]) -> D | None:
        # Later directories of the same type are ignored.
        for directory in self.directories:
            if isinstance(directory, directory_type):
                return directory
        return None

    def contains_directory_of_type(self, directory_type: type[Directory]) -> bool:
        return self.get_first_directory_of_type(directory_type) is not None

    @property
    def directory_count(self) -> int:
        return len(self.directories)

    @property
    def has_errors(self) -> bool:
        return any(d.has_errors for d in self.directories)

    def to_dict(self) -> dict[str, dict[str, str]]:
        """Flatten to ``{directory name: {tag name: description}}``.

        Directories sharing a name are merged, the later tag winning.
        """
        result: dict[str, dict[str, str]] = {}
        for directory in self.directories:
            entries = result.setdefault(directory.name, {})
            for tag in directory.tags:
                entries[tag.name] = tag.description
        return result

    def __iter__(self) -> Iterator[Directory]:
        return iter(self.directories)


def _dms_to_decimal(triple: Any, ref: Any) -> float | None:
    if ref is None or triple is None:
        return None
    if isinstance(ref, bytes):
        ref = ref.decode("ascii", errors="ignore")
    try:
        degrees, minutes, seconds = (float(part) for part in triple)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    return GeoLocation.from_dms(degrees, minutes, seconds, str(ref).strip("\x00"))
