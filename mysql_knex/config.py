"""
Connection settings for the MySQL handle.

Accepts the field names of the original JSON config (``host``, ``port``,
``user``, ``name``, ``password``, ``database``). ``name`` and ``database``
both carried the database name there; here they collapse into ``database``.
"""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, model_validator

logger = logging.getLogger("mysql_knex")

_DATABASE_KEYS = ("database", "name", "dbname")


class DBConfig(BaseModel):
    host: str = "localhost"
    port: int = 3306
    user: str
    password: str = ""
    database: str
    charset: str = "utf8mb4"

    @model_validator(mode="before")
    @classmethod
    def _collapse_database_name(cls, data):
        if not isinstance(data, dict):
            return data
        given = {k: data[k] for k in _DATABASE_KEYS if data.get(k)}
        if len(set(given.values())) > 1:
            logger.warning(
                f"Conflicting database names in config {given}; using '{next(iter(given.values()))}'"
            )
        data = {k: v for k, v in data.items() if k not in ("name", "dbname")}
        if given:
            data["database"] = next(iter(given.values()))
        return data

    def address(self):
        return f"{self.host}:{self.port}"

    def dsn(self):
        """Driver address string, ``user:password@tcp(host:port)/database``."""
        return f"{self.user}:{self.password}@tcp({self.address()})/{self.database}"

    @classmethod
    def from_env(cls, prefix="MYSQL_"):
        """Build a config from ``<prefix>HOST``, ``<prefix>PORT`` ... after loading ``.env``."""
        load_dotenv()

        def env(key, default=None):
            return os.getenv(f"{prefix}{key}", default)

        return cls(
            host=env("HOST", "localhost"),
            port=int(env("PORT", "3306")),
            user=env("USER", ""),
            password=env("PASSWORD", ""),
            database=env("DATABASE") or env("NAME", ""),
            charset=env("CHARSET", "utf8mb4"),
        )
