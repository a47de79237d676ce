"""Mapping registry — the loaded mapping and its compiled rules.

The registry owns every map object of one mapping, indexed by resource:
databases, class maps and translation tables. Registering a resource that is
already present replaces the earlier object. This differs from the
first-write-wins fields of the map objects themselves.

Lifecycle:
  1. Load      — the parser adds objects and prefixes (single-threaded)
  2. Validate  — ``validate()`` once, before any query activity
  3. Compile   — ``compiled_projection_rules()`` on first demand, once,
                 safe under concurrent first access; cached afterwards
"""

from __future__ import annotations

import logging
import threading

from rdflib import BNode, Graph, URIRef
from rdflib.namespace import NamespaceManager

from .compiler import compile_projection_rules
from .database import ConnectionDescriptor
from .errors import NoConnectionDescriptor
from .translation_table import TranslationTable
from .types import ClassMap, ProjectionRule, Resource
from .vocab import DEFAULT_PREFIXES

logger = logging.getLogger(__name__)


class MappingRegistry:
    """A mapping: databases, class maps, translation tables and prefixes."""

    def __init__(self, mapping_uri: str | None = None) -> None:
        if mapping_uri is None:
            self._resource: Resource = BNode()
        else:
            self._resource = URIRef(mapping_uri)

        self._databases: dict[Resource, ConnectionDescriptor] = {}
        self._class_maps: dict[Resource, ClassMap] = {}
        self._translation_tables: dict[Resource, TranslationTable] = {}

        self._namespaces = NamespaceManager(Graph(), bind_namespaces="none")
        for prefix, namespace in DEFAULT_PREFIXES.items():
            self.set_prefix(prefix, str(namespace))

        self._compiled: tuple[ProjectionRule, ...] | None = None
        self._compile_lock = threading.Lock()

    @property
    def resource(self) -> Resource:
        return self._resource

    # -----------------------------------------------------------------------
    # Databases
    # -----------------------------------------------------------------------

    def add_database(self, database: ConnectionDescriptor) -> None:
        if database.resource in self._databases:
            logger.debug("Replacing %s", database)
        self._databases[database.resource] = database

    def database(self, resource: Resource) -> ConnectionDescriptor | None:
        return self._databases.get(resource)

    def databases(self) -> list[ConnectionDescriptor]:
        return list(self._databases.values())

    # -----------------------------------------------------------------------
    # Class maps
    # -----------------------------------------------------------------------

    def add_class_map(self, class_map: ClassMap) -> None:
        if class_map.resource in self._class_maps:
            logger.debug("Replacing %s", class_map)
        self._class_maps[class_map.resource] = class_map

    def class_map(self, resource: Resource) -> ClassMap | None:
        return self._class_maps.get(resource)

    def class_map_resources(self) -> list[Resource]:
        return list(self._class_maps)

    # -----------------------------------------------------------------------
    # Translation tables
    # -----------------------------------------------------------------------

    def add_translation_table(self, table: TranslationTable) -> None:
        if table.resource in self._translation_tables:
            logger.debug("Replacing %s", table)
        self._translation_tables[table.resource] = table

    def translation_table(self, resource: Resource) -> TranslationTable | None:
        return self._translation_tables.get(resource)

    def translation_tables(self) -> list[TranslationTable]:
        return list(self._translation_tables.values())

    # -----------------------------------------------------------------------
    # Prefixes
    # -----------------------------------------------------------------------

    def set_prefix(self, prefix: str, namespace: str) -> None:
        """Bind *prefix* to *namespace*, replacing any earlier binding."""
        self._namespaces.bind(prefix, URIRef(namespace), override=True, replace=True)
        self._namespaces.reset()

    def namespace_for(self, prefix: str) -> str | None:
        namespace = self._namespaces.store.namespace(prefix)
        return str(namespace) if namespace is not None else None

    def prefix_for(self, namespace: str) -> str | None:
        return self._namespaces.store.prefix(URIRef(namespace))

    def prefixes(self) -> dict[str, str]:
        return {prefix: str(namespace) for prefix, namespace in self._namespaces.namespaces()}

    def qname(self, uri: str) -> str:
        """Shorten *uri* with the longest bound namespace; unchanged if none."""
        try:
            return self._namespaces.curie(URIRef(uri), generate=False)
        except (KeyError, ValueError):
            return uri

    def expand(self, curie: str) -> str:
        """Expand ``prefix:local`` to a full URI. Raises ValueError if unbound."""
        return str(self._namespaces.expand_curie(curie))

    # -----------------------------------------------------------------------
    # Validation
    # -----------------------------------------------------------------------

    def validate(self) -> None:
        """Validate every map object. Raises the first MappingError found."""
        if not self._databases:
            raise NoConnectionDescriptor("No d2rq:Database defined in the mapping")
        for database in self._databases.values():
            database.validate()
        for table in self._translation_tables.values():
            table.validate()
        for class_map in self._class_maps.values():
            class_map.validate()

    # -----------------------------------------------------------------------
    # Compiled rules
    # -----------------------------------------------------------------------

    def compiled_projection_rules(self) -> tuple[ProjectionRule, ...]:
        """Rules of every class map, compiled and type-checked once."""
        if self._compiled is not None:
            return self._compiled
        with self._compile_lock:
            if self._compiled is None:
                compiled = compile_projection_rules(list(self._class_maps.values()))
                logger.info(
                    "Compiled %d projection rule(s) from %d class map(s)",
                    len(compiled), len(self._class_maps),
                )
                self._compiled = compiled
        return self._compiled

    @property
    def is_compiled(self) -> bool:
        return self._compiled is not None

    def __repr__(self) -> str:
        return (
            f"MappingRegistry({self._resource.n3()}: "
            f"{len(self._databases)} databases, "
            f"{len(self._class_maps)} class maps, "
            f"{len(self._translation_tables)} translation tables)"
        )
