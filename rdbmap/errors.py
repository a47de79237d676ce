"""Classified configuration errors.

Every error raised by rdbmap is a MappingError carrying an ErrorCode, so
callers can branch on the failure category without parsing messages. Errors
are raised at the point of detection and are never downgraded internally:
any failure aborts use of the mapping.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .connection import ConnectedDatabase
    from .types import Attribute


class ErrorCode(str, Enum):
    """Machine-distinguishable failure categories."""
    MAPOBJECT_DUPLICATE_FIELD = "MAPOBJECT_DUPLICATE_FIELD"
    MAPOBJECT_MISSING_FIELD = "MAPOBJECT_MISSING_FIELD"

    DATABASE_DUPLICATE_ODBCDSN = "DATABASE_DUPLICATE_ODBCDSN"
    DATABASE_DUPLICATE_JDBCDSN = "DATABASE_DUPLICATE_JDBCDSN"
    DATABASE_DUPLICATE_JDBCDRIVER = "DATABASE_DUPLICATE_JDBCDRIVER"
    DATABASE_DUPLICATE_USERNAME = "DATABASE_DUPLICATE_USERNAME"
    DATABASE_DUPLICATE_PASSWORD = "DATABASE_DUPLICATE_PASSWORD"
    DATABASE_ODBC_WITH_JDBC = "DATABASE_ODBC_WITH_JDBC"
    DATABASE_MISSING_JDBCDRIVER = "DATABASE_MISSING_JDBCDRIVER"
    DATABASE_ODBC_WITH_JDBCDRIVER = "DATABASE_ODBC_WITH_JDBCDRIVER"
    DATABASE_JDBCDRIVER_CLASS_NOT_FOUND = "DATABASE_JDBCDRIVER_CLASS_NOT_FOUND"
    DATABASE_CONFLICTING_COLUMN_TYPE = "DATABASE_CONFLICTING_COLUMN_TYPE"

    TRANSLATIONTABLE_DUPLICATE_HREF = "TRANSLATIONTABLE_DUPLICATE_HREF"
    TRANSLATIONTABLE_DUPLICATE_JAVACLASS = "TRANSLATIONTABLE_DUPLICATE_JAVACLASS"
    TRANSLATIONTABLE_TRANSLATION_AND_HREF = "TRANSLATIONTABLE_TRANSLATION_AND_HREF"
    TRANSLATIONTABLE_TRANSLATION_AND_JAVACLASS = "TRANSLATIONTABLE_TRANSLATION_AND_JAVACLASS"
    TRANSLATIONTABLE_HREF_AND_JAVACLASS = "TRANSLATIONTABLE_HREF_AND_JAVACLASS"

    MAPPING_NO_DATABASE = "MAPPING_NO_DATABASE"
    SQL_COLUMN_NOT_FOUND = "SQL_COLUMN_NOT_FOUND"


class MappingError(ValueError):
    """Base class for all classified mapping errors."""

    default_code: ErrorCode | None = None

    def __init__(self, message: str, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else self.default_code

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        return f"{self.message} ({self.code.value})"


class DuplicateField(MappingError):
    """A first-write-wins field was assigned a second time."""
    default_code = ErrorCode.MAPOBJECT_DUPLICATE_FIELD


class MissingField(MappingError):
    """A field required by a map object was never assigned."""
    default_code = ErrorCode.MAPOBJECT_MISSING_FIELD


class ConflictingConnectionMode(MappingError):
    """Both an ODBC DSN and a connection string were configured."""
    default_code = ErrorCode.DATABASE_ODBC_WITH_JDBC


class MissingDriver(MappingError):
    """A connection string was configured without a driver."""
    default_code = ErrorCode.DATABASE_MISSING_JDBCDRIVER


class DriverModeConflict(MappingError):
    """A driver was configured together with an ODBC DSN."""
    default_code = ErrorCode.DATABASE_ODBC_WITH_JDBCDRIVER


class ConflictingColumnType(MappingError):
    """One column was classified as more than one of text, numeric, date."""
    default_code = ErrorCode.DATABASE_CONFLICTING_COLUMN_TYPE


class DriverNotFound(MappingError):
    """Strict registration was requested for a driver that cannot be loaded."""
    default_code = ErrorCode.DATABASE_JDBCDRIVER_CLASS_NOT_FOUND

    def __init__(self, driver_name: str, code: ErrorCode | None = None) -> None:
        super().__init__(f"Database driver class not found: {driver_name}", code)
        self.driver_name = driver_name


class TranslationTableConflict(MappingError):
    """A translation table combines mutually exclusive definitions."""


class NoConnectionDescriptor(MappingError):
    """Validation ran against a mapping without any database."""
    default_code = ErrorCode.MAPPING_NO_DATABASE


class UnknownColumn(MappingError):
    """A compiled rule requires an attribute its database does not know."""
    default_code = ErrorCode.SQL_COLUMN_NOT_FOUND

    def __init__(self, attribute: Attribute, database: ConnectedDatabase | None = None) -> None:
        where = f" in {database}" if database is not None else ""
        super().__init__(f"Column {attribute} not found{where}")
        self.attribute = attribute
        self.database = database
