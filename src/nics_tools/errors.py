"""Exception hierarchy shared by the nics_tools components."""


class NicsToolsError(Exception):
    """Base class for every error raised by nics_tools."""


# ============================================================================
# Image metadata
# ============================================================================


class MetadataReadError(NicsToolsError):
    """Metadata could not be read from a single image file."""

    def __init__(self, path: str, message: str):
        self.path: str = path
        self.message: str = message
        super().__init__(f"Exception while processing {path}: {message}")


class ImageProcessingError(MetadataReadError):
    """The file was read but its contents could not be decoded."""


class MetadataIOError(MetadataReadError, OSError):
    """The file could not be opened or read."""


# ============================================================================
# Database
# ============================================================================


class DbError(NicsToolsError):
    """Base class for connection helper failures."""


class DriverUnavailableError(DbError):
    """The database driver module cannot be imported."""


class DbConnectionError(DbError):
    """The driver refused the connection (bad credentials, unreachable host)."""
