"""Connection settings for the PostgreSQL helper.

Values are resolved in this order: explicit arguments, ``NICS_DB_*``
environment variables (optionally loaded from a ``.env`` file), then the
built-in defaults below.
"""

import os
from pathlib import Path
from typing import Literal

from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr

DEFAULT_USERNAME = "postgres"
DEFAULT_PASSWORD = "postgrespassword"
DEFAULT_HOST = "localhost"
DEFAULT_DATABASE = "sacore"
DEFAULT_SCHEME = "postgresql"

ENV_VARS: dict[str, str] = {
    "username": "NICS_DB_USER",
    "password": "NICS_DB_PASSWORD",
    "host": "NICS_DB_HOST",
    "database": "NICS_DB_NAME",
    "scheme": "NICS_DB_SCHEME",
}


class DbSettings(BaseModel):
    """Credentials and location of the target database."""

    model_config = ConfigDict(frozen=True)

    username: str = Field(default=DEFAULT_USERNAME, min_length=1)
    password: SecretStr = Field(default=SecretStr(DEFAULT_PASSWORD))
    host: str = Field(default=DEFAULT_HOST, min_length=1)
    database: str = Field(default=DEFAULT_DATABASE, min_length=1)
    scheme: Literal["postgresql", "postgres"] = DEFAULT_SCHEME

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "DbSettings":
        """Build settings from the environment.

        Args:
            env_file: Optional .env file. When omitted, the nearest .env
                      from the working directory upwards is used if present.
                      Variables already set in the environment win. The
                      file is only read; ``os.environ`` is left untouched.
        """
        dotenv_path = env_file if env_file is not None else find_dotenv(usecwd=True)
        file_values = dotenv_values(dotenv_path) if dotenv_path else {}

        values: dict[str, str] = {}
        for field_name, variable in ENV_VARS.items():
            value = os.getenv(variable) or file_values.get(variable)
            if value:
                values[field_name] = value
        return cls.model_validate(values)

    def with_overrides(
        self,
        *,
        username: str | None = None,
        password: str | None = None,
        host: str | None = None,
        database: str | None = None,
    ) -> "DbSettings":
        """Return a copy with every non-None argument applied."""
        updates = {
            name: value
            for name, value in (
                ("username", username),
                ("password", password),
                ("host", host),
                ("database", database),
            )
            if value is not None
        }
        if not updates:
            return self
        return self.model_validate({**self.model_dump(), **updates})
