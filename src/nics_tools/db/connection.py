"""Open PostgreSQL connections with defaulted credentials."""

import importlib
from collections.abc import Iterator
from contextlib import contextmanager
from types import ModuleType
from typing import TYPE_CHECKING

from loguru import logger

from ..errors import DbConnectionError, DriverUnavailableError
from .settings import DEFAULT_SCHEME, DbSettings

if TYPE_CHECKING:
    from psycopg2.extensions import connection as Connection

DRIVER_MODULE = "psycopg2"


def build_connection_url(host: str, database: str, scheme: str = DEFAULT_SCHEME) -> str:
    return f"{scheme}://{host}/{database}"


def load_driver() -> ModuleType:
    """Import the database driver.

    Raises:
        DriverUnavailableError: If the driver package is not installed
    """
    try:
        return importlib.import_module(DRIVER_MODULE)
    except ImportError as exc:
        raise DriverUnavailableError(
            f"Database driver '{DRIVER_MODULE}' is not available: {exc}"
        ) from exc


def get_connection(
    username: str | None = None,
    password: str | None = None,
    host: str | None = None,
    database: str | None = None,
    *,
    settings: DbSettings | None = None,
) -> "Connection":
    """Open a new connection, filling any None argument from settings.

    A single attempt is made; there is no retry or pooling. The caller owns
    the returned connection and must close it.

    Args:
        username: Login role
        password: Login password
        host: Server host name
        database: Database name
        settings: Defaults to apply. Read from the environment when omitted.

    Raises:
        DriverUnavailableError: If the driver cannot be imported
        DbConnectionError: If the driver refuses the connection
    """
    base = settings if settings is not None else DbSettings.from_env()
    resolved = base.with_overrides(
        username=username, password=password, host=host, database=database
    )

    driver = load_driver()
    url = build_connection_url(resolved.host, resolved.database, resolved.scheme)
    logger.info(f"Connecting to {url} as {resolved.username}")

    try:
        return driver.connect(
            url,
            user=resolved.username,
            password=resolved.password.get_secret_value(),
        )
    except driver.Error as exc:
        logger.warning(f"Failed to connect to {url} as {resolved.username}: {exc}")
        raise DbConnectionError(f"Unable to connect to {url}: {exc}") from exc


@contextmanager
def closing_connection(
    username: str | None = None,
    password: str | None = None,
    host: str | None = None,
    database: str | None = None,
    *,
    settings: DbSettings | None = None,
) -> Iterator["Connection"]:
    """Context manager around get_connection that always closes the connection."""
    conn = get_connection(username, password, host, database, settings=settings)
    try:
        yield conn
    finally:
        conn.close()
        logger.debug("Database connection closed")
