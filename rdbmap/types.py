"""Core types shared by the registry, the compiler and connection handles.

Attributes name relational columns as (table, column) pairs. Compiled rules
may read columns through table aliases; ``AliasMap`` resolves an aliased
attribute back to the table it was declared on.

ClassMap and ProjectionRule are produced outside this package (by the
mapping parser and the rule builder). They are described here as protocols
so the registry can aggregate and type-check them without depending on how
they are built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Mapping, Protocol, Union, runtime_checkable

from rdflib import BNode, URIRef

if TYPE_CHECKING:
    from .database import ConnectionDescriptor


# Identity of every map object: a named or anonymous RDF resource
Resource = Union[URIRef, BNode]


# ---------------------------------------------------------------------------
# ColumnType — classification of a relational column
# ---------------------------------------------------------------------------

class ColumnType(Enum):
    """How values of a column are treated when building SQL expressions."""
    TEXT = "text"
    NUMERIC = "numeric"
    DATE = "date"


# ---------------------------------------------------------------------------
# Attribute — a (table, column) identity
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Attribute:
    """A column of a table, written ``table.column``.

    The table name may carry a schema prefix (``schema.table``); the column
    is always the last dotted segment.
    """
    table: str
    column: str

    @classmethod
    def parse(cls, qualified_name: str) -> Attribute:
        """Build an attribute from ``table.column`` or ``schema.table.column``."""
        table, sep, column = qualified_name.rpartition(".")
        if not sep or not table or not column:
            raise ValueError(f"Attribute name must be 'table.column': {qualified_name!r}")
        return cls(table=table, column=column)

    @property
    def qualified_name(self) -> str:
        return f"{self.table}.{self.column}"

    def with_table(self, table: str) -> Attribute:
        return Attribute(table=table, column=self.column)

    def __str__(self) -> str:
        return self.qualified_name

    def __repr__(self) -> str:
        return f"Attr({self.qualified_name})"


# ---------------------------------------------------------------------------
# AliasMap — alias table name → original table name
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AliasMap:
    """Table aliases in effect for one compiled rule."""
    aliases: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def of(cls, **aliases: str) -> AliasMap:
        return cls(aliases=dict(aliases))

    def is_alias(self, table: str) -> bool:
        return table in self.aliases

    def original_of(self, attribute: Attribute) -> Attribute:
        """Return the attribute on its original (non-aliased) table."""
        original = self.aliases.get(attribute.table)
        if original is None:
            return attribute
        return attribute.with_table(original)

    def __hash__(self) -> int:
        return hash(frozenset(self.aliases.items()))


NO_ALIASES = AliasMap()


# ---------------------------------------------------------------------------
# ProjectionRule — one compiled, executable rule
# ---------------------------------------------------------------------------

@runtime_checkable
class ProjectionRule(Protocol):
    """A compiled rule reading attributes from one database."""

    @property
    def database(self) -> ConnectionDescriptor: ...

    @property
    def aliases(self) -> AliasMap: ...

    def required_attributes(self) -> Iterable[Attribute]: ...


@dataclass(frozen=True)
class Projection:
    """Plain ProjectionRule: a named set of attributes read from a database."""
    name: str
    database: ConnectionDescriptor = field(compare=False)
    attributes: frozenset[Attribute] = field(default_factory=frozenset)
    aliases: AliasMap = NO_ALIASES

    def required_attributes(self) -> frozenset[Attribute]:
        return self.attributes

    def __repr__(self) -> str:
        cols = ", ".join(sorted(a.qualified_name for a in self.attributes))
        return f"Projection({self.name}: {cols})"


# ---------------------------------------------------------------------------
# ClassMap — external map object
# ---------------------------------------------------------------------------

@runtime_checkable
class ClassMap(Protocol):
    """A map object that compiles itself into projection rules."""

    @property
    def resource(self) -> Resource: ...

    def validate(self) -> None: ...

    def compiled_projection_rules(self) -> Iterable[ProjectionRule]: ...

