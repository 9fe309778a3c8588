"""Test configuration and fixtures for nics_tools.

This module provides:
- Pytest configuration (markers, live database check)
- Function-scoped image fixtures synthesized with PIL
- Environment isolation for the database settings
"""

import socket
from pathlib import Path

import pytest
from PIL import ExifTags, Image
from PIL.TiffImagePlugin import IFDRational

from nics_tools.db.settings import ENV_VARS

# Known coordinate for the GPS fixture: 42.3601 N, 71.0589 W
GPS_LATITUDE = 42.3601
GPS_LONGITUDE = -71.0589


# ============================================================================
# Pytest Configuration
# ============================================================================


def is_postgres_running(host: str = "localhost", port: int = 5432, timeout: float = 2) -> bool:
    """Check whether anything is listening on the PostgreSQL port."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "requires_postgres: requires a PostgreSQL server on localhost:5432",
    )


def pytest_runtest_setup(item):
    """Skip live database tests when no server is reachable."""
    if item.get_closest_marker("requires_postgres") and not is_postgres_running():
        pytest.skip("PostgreSQL not running on localhost:5432")


# ============================================================================
# Helpers
# ============================================================================


def write_jpeg(path: Path, exif: Image.Exif | None = None, size: tuple[int, int] = (64, 48)) -> Path:
    """Save a solid-colour JPEG, optionally carrying EXIF data."""
    img = Image.new("RGB", size, color=(73, 109, 137))
    if exif is None:
        img.save(path, "JPEG")
    else:
        img.save(path, "JPEG", exif=exif)
    return path


def gps_exif() -> Image.Exif:
    """EXIF block with camera tags, a sub-IFD and a GPS IFD at 42.3601, -71.0589."""
    exif = Image.Exif()
    exif[0x010F] = "TestCamera"  # Make
    exif[0x0110] = "TestModel X1"  # Model
    exif[ExifTags.IFD.Exif] = {
        0x9003: "2024:01:15 10:30:00",  # DateTimeOriginal
        0x829D: IFDRational(28, 10),  # FNumber
    }
    exif[ExifTags.IFD.GPSInfo] = {
        1: "N",  # GPSLatitudeRef
        2: (IFDRational(42, 1), IFDRational(21, 1), IFDRational(3636, 100)),
        3: "W",  # GPSLongitudeRef
        4: (IFDRational(71, 1), IFDRational(3, 1), IFDRational(3204, 100)),
    }
    return exif


# ============================================================================
# Function-Scoped Fixtures
# ============================================================================


@pytest.fixture
def plain_image_path(tmp_path: Path) -> Path:
    """JPEG without any EXIF data."""
    return write_jpeg(tmp_path / "plain.jpg")


@pytest.fixture
def camera_image_path(tmp_path: Path) -> Path:
    """JPEG with IFD0 camera tags only."""
    exif = Image.Exif()
    exif[0x010F] = "TestCamera"
    exif[0x0110] = "TestModel X1"
    exif[0x0112] = 1  # Orientation
    return write_jpeg(tmp_path / "camera.jpg", exif)


@pytest.fixture
def gps_image_path(tmp_path: Path) -> Path:
    """JPEG with camera, sub-IFD and GPS tags."""
    return write_jpeg(tmp_path / "gps.jpg", gps_exif())


@pytest.fixture
def png_image_path(tmp_path: Path) -> Path:
    path = tmp_path / "image.png"
    Image.new("RGBA", (20, 10), color=(255, 0, 0, 128)).save(path, "PNG")
    return path


@pytest.fixture
def not_an_image_path(tmp_path: Path) -> Path:
    path = tmp_path / "invalid.jpg"
    _ = path.write_text("not an image")
    return path


@pytest.fixture
def missing_path(tmp_path: Path) -> Path:
    return tmp_path / "does_not_exist.jpg"


@pytest.fixture
def clean_db_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Remove NICS_DB_* variables and run from an empty directory (no .env)."""
    for variable in ENV_VARS.values():
        monkeypatch.delenv(variable, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
