from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = 10

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        """Build from a settings ``DB_CONFIG`` mapping (see ``config/``)."""
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "shiftwise")),
            connect_timeout=int(db_config.get("connect_timeout", 10)),
        )


class DatabaseConnection:
    """Process-wide MySQL connection factory.

    Each repository call opens its own connection and closes it when done;
    nothing is pooled.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @property
    def database_name(self) -> str:
        return self._config.database

    def connect(self, *, with_database: bool = True):
        # Schema bootstrap connects without a database so it can CREATE it.
        params = {
            "host": self._config.host,
            "port": self._config.port,
            "user": self._config.user,
            "password": self._config.password,
            "connection_timeout": self._config.connect_timeout,
        }
        if with_database:
            params["database"] = self._config.database
        return mysql.connector.connect(**params)
