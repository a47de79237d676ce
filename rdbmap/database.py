"""Connection descriptor — a d2rq:Database from the mapping.

A descriptor holds the connection parameters and column type hints for one
relational source. It is configured while the mapping loads, validated once,
and from then on only read. The connection handle is built lazily on first
use, at most once per descriptor even under concurrent first access.

Connection modes:
  ODBC  — ``odbc_dsn`` only; the bridging driver is implied
  URL   — ``jdbc_dsn`` plus ``jdbc_driver``
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from .connection import ConnectedDatabase
from .drivers import ODBC_BRIDGE_DRIVER, ODBC_URL_PREFIX, DriverRegistry, default_registry
from .errors import (
    ConflictingColumnType,
    ConflictingConnectionMode,
    DriverModeConflict,
    ErrorCode,
    MissingDriver,
)
from .map_object import MapObject
from .types import Resource
from .vocab import D2RQ

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[..., ConnectedDatabase]


class ConnectionDescriptor(MapObject):
    """Configuration for one relational data source."""

    vocabulary_class = D2RQ.Database

    def __init__(
        self,
        resource: Resource,
        drivers: DriverRegistry | None = None,
        connection_factory: ConnectionFactory = ConnectedDatabase,
    ) -> None:
        super().__init__(resource)
        self._drivers = drivers if drivers is not None else default_registry
        self._connection_factory = connection_factory

        self.odbc_dsn: str | None = None
        self.jdbc_dsn: str | None = None
        self.jdbc_driver: str | None = None
        self.username: str | None = None
        self.password: str | None = None
        self.text_columns: set[str] = set()
        self.numeric_columns: set[str] = set()
        self.date_columns: set[str] = set()
        self.expression_translator: str | None = None
        self.allow_distinct: bool = True

        self._connection: ConnectedDatabase | None = None
        self._connection_lock = threading.Lock()

    # -----------------------------------------------------------------------
    # First-write-wins fields
    # -----------------------------------------------------------------------

    def set_odbc_dsn(self, odbc_dsn: str) -> None:
        self.assert_not_yet_defined(self.odbc_dsn, D2RQ.odbcDSN, ErrorCode.DATABASE_DUPLICATE_ODBCDSN)
        self.odbc_dsn = odbc_dsn

    def set_jdbc_dsn(self, jdbc_dsn: str) -> None:
        self.assert_not_yet_defined(self.jdbc_dsn, D2RQ.jdbcDSN, ErrorCode.DATABASE_DUPLICATE_JDBCDSN)
        self.jdbc_dsn = jdbc_dsn

    def set_jdbc_driver(self, jdbc_driver: str) -> None:
        self.assert_not_yet_defined(
            self.jdbc_driver, D2RQ.jdbcDriver, ErrorCode.DATABASE_DUPLICATE_JDBCDRIVER
        )
        self.jdbc_driver = jdbc_driver

    def set_username(self, username: str) -> None:
        self.assert_not_yet_defined(self.username, D2RQ.username, ErrorCode.DATABASE_DUPLICATE_USERNAME)
        self.username = username

    def set_password(self, password: str) -> None:
        self.assert_not_yet_defined(self.password, D2RQ.password, ErrorCode.DATABASE_DUPLICATE_PASSWORD)
        self.password = password

    # -----------------------------------------------------------------------
    # Column type hints
    # -----------------------------------------------------------------------

    def add_text_column(self, column: str) -> None:
        self.text_columns.add(column)

    def add_numeric_column(self, column: str) -> None:
        self.numeric_columns.add(column)

    def add_date_column(self, column: str) -> None:
        self.date_columns.add(column)

    # -----------------------------------------------------------------------
    # Last-write-wins fields
    # -----------------------------------------------------------------------

    def set_expression_translator(self, expression_translator: str | None) -> None:
        self.expression_translator = expression_translator

    def set_allow_distinct(self, allow: bool) -> None:
        self.allow_distinct = allow

    # -----------------------------------------------------------------------
    # Connection handle
    # -----------------------------------------------------------------------

    def connection(self) -> ConnectedDatabase:
        """Return the connection handle, building it on first call."""
        if self._connection is not None:
            return self._connection
        with self._connection_lock:
            if self._connection is None:
                self._connection = self._connect()
        return self._connection

    def _connect(self) -> ConnectedDatabase:
        if self.odbc_dsn is not None:
            driver_name = ODBC_BRIDGE_DRIVER
            url = ODBC_URL_PREFIX + self.odbc_dsn
        else:
            driver_name = self.jdbc_driver
            url = self.jdbc_dsn
        driver = None
        if driver_name is not None:
            driver = self._drivers.register_strict(driver_name)
        logger.info("Connecting %s to %s", self, url)
        return self._connection_factory(
            url,
            username=self.username,
            password=self.password,
            expression_translator=self.expression_translator,
            allow_distinct=self.allow_distinct,
            text_columns=set(self.text_columns),
            numeric_columns=set(self.numeric_columns),
            date_columns=set(self.date_columns),
            driver=driver,
        )

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    # -----------------------------------------------------------------------
    # Validation
    # -----------------------------------------------------------------------

    def validate(self) -> None:
        if self.jdbc_dsn is not None and self.odbc_dsn is not None:
            raise ConflictingConnectionMode(f"Can't combine d2rq:odbcDSN with d2rq:jdbcDSN in {self}")
        if self.jdbc_dsn is not None and self.jdbc_driver is None:
            raise MissingDriver(f"Missing d2rq:jdbcDriver in {self}")
        if self.odbc_dsn is not None and self.jdbc_driver is not None:
            raise DriverModeConflict(f"Can't use d2rq:jdbcDriver with d2rq:odbcDSN in {self}")
        self._check_column_types()

    def _check_column_types(self) -> None:
        classified = (
            ("d2rq:textColumn", self.text_columns),
            ("d2rq:numericColumn", self.numeric_columns),
            ("d2rq:dateColumn", self.date_columns),
        )
        for i, (first_prop, first) in enumerate(classified):
            for second_prop, second in classified[i + 1:]:
                overlap = first & second
                if overlap:
                    column = sorted(overlap)[0]
                    raise ConflictingColumnType(
                        f"Column {column} is both {first_prop} and {second_prop} in {self}"
                    )
