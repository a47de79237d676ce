"""Connection handle — the live, reusable connection state built from a descriptor.

Opening sockets and running SQL belong to the query layer. The handle keeps
everything that layer needs: connection string, credentials, dialect
override, DISTINCT capability and the column type hints. It answers column
type queries, which the compiler uses to reject unknown columns early.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from .errors import UnknownColumn
from .types import Attribute, ColumnType

logger = logging.getLogger(__name__)


class ConnectedDatabase:
    """Connection handle for one relational source."""

    def __init__(
        self,
        url: str | None,
        username: str | None = None,
        password: str | None = None,
        expression_translator: str | None = None,
        allow_distinct: bool = True,
        text_columns: Iterable[str] = (),
        numeric_columns: Iterable[str] = (),
        date_columns: Iterable[str] = (),
        driver: Any = None,
    ) -> None:
        self.url = url
        self.username = username
        self.password = password
        self.expression_translator = expression_translator
        self.allow_distinct = allow_distinct
        self.driver = driver

        # Frozen copies: later changes to the descriptor do not leak in
        self.text_columns = frozenset(text_columns)
        self.numeric_columns = frozenset(numeric_columns)
        self.date_columns = frozenset(date_columns)

    def column_type(self, attribute: Attribute) -> ColumnType:
        """Classify *attribute*, or raise UnknownColumn.

        Type hints from the mapping take precedence over the live schema.
        """
        name = attribute.qualified_name
        if name in self.text_columns:
            return ColumnType.TEXT
        if name in self.numeric_columns:
            return ColumnType.NUMERIC
        if name in self.date_columns:
            return ColumnType.DATE
        inspected = self._inspect_column_type(attribute)
        if inspected is None:
            raise UnknownColumn(attribute, self)
        return inspected

    def _inspect_column_type(self, attribute: Attribute) -> ColumnType | None:
        """Schema lookup hook for handles backed by a live connection."""
        return None

    def known_columns(self) -> frozenset[str]:
        return self.text_columns | self.numeric_columns | self.date_columns

    def __repr__(self) -> str:
        return f"ConnectedDatabase({self.url})"
