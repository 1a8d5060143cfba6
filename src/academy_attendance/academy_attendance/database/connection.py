from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

import mysql.connector

DEFAULT_CONNECT_TIMEOUT = 10


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config.get("password", "")),
            database=str(db_config["database"]),
            connect_timeout=int(db_config.get("connect_timeout", DEFAULT_CONNECT_TIMEOUT)),
        )


class DatabaseConnection:
    """Process-wide factory for short-lived store connections.

    Each repository call opens its own connection, runs one transaction and
    closes it (see `db_cursor`), unless the calling thread is inside a
    `db_transaction` block, which shares its connection.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._local = threading.local()

    @property
    def database(self) -> str:
        return self._config.database

    @property
    def shared(self):
        """Connection of the enclosing `db_transaction` on this thread, if any."""
        return getattr(self._local, "conn", None)

    @shared.setter
    def shared(self, conn) -> None:
        self._local.conn = conn

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None or cls._instance._config != config:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            connection_timeout=int(self._config.connect_timeout),
            autocommit=False,
        )
