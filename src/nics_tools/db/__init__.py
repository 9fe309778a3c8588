from .connection import build_connection_url, closing_connection, get_connection, load_driver
from .settings import DbSettings

__all__ = [
    "DbSettings",
    "build_connection_url",
    "closing_connection",
    "get_connection",
    "load_driver",
]
