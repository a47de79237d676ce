"""Tests for the mapping registry: registries, prefixes, validation, compilation."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import threading
import time

import pytest
from rdflib import BNode, URIRef

from rdbmap.database import ConnectionDescriptor
from rdbmap.drivers import DriverRegistry
from rdbmap.errors import (
    ConflictingConnectionMode,
    ErrorCode,
    MissingDriver,
    NoConnectionDescriptor,
    TranslationTableConflict,
    UnknownColumn,
)
from rdbmap.mapping import MappingRegistry
from rdbmap.translation_table import TranslationTable
from rdbmap.types import Attribute, Projection
from rdbmap.vocab import D2RQ

EX = "http://example.org/map#"


def _db(name: str = "db") -> ConnectionDescriptor:
    db = ConnectionDescriptor(URIRef(EX + name), drivers=DriverRegistry())
    db.set_jdbc_dsn("jdbc:test://host/db")
    db.set_jdbc_driver("sqlite3")
    db.add_numeric_column("orders.id")
    db.add_numeric_column("orders.total")
    return db


class _StubClassMap:
    """Class map compiling to a fixed list of rules."""

    def __init__(self, name, rules=(), error=None, delay=0.0, log=None):
        self.resource = URIRef(EX + name)
        self.rules = list(rules)
        self.error = error
        self.delay = delay
        self.log = log
        self.compile_count = 0

    def validate(self):
        if self.log is not None:
            self.log.append(self.resource)
        if self.error is not None:
            raise self.error

    def compiled_projection_rules(self):
        self.compile_count += 1
        if self.delay:
            time.sleep(self.delay)
        return list(self.rules)


def _rule(db, *columns, name="r") -> Projection:
    return Projection(name, db, frozenset(Attribute.parse(c) for c in columns))


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

class TestIdentity:
    def test_named_mapping(self):
        mapping = MappingRegistry("http://example.org/mapping")
        assert mapping.resource == URIRef("http://example.org/mapping")

    def test_anonymous_mapping(self):
        first = MappingRegistry()
        second = MappingRegistry()
        assert isinstance(first.resource, BNode)
        assert first.resource != second.resource


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------

class TestRegistries:
    def test_add_and_lookup_database(self):
        mapping = MappingRegistry()
        db = _db()
        mapping.add_database(db)
        assert mapping.database(db.resource) is db
        assert mapping.databases() == [db]

    def test_lookup_absent_returns_none(self):
        mapping = MappingRegistry()
        missing = URIRef(EX + "missing")
        assert mapping.database(missing) is None
        assert mapping.class_map(missing) is None
        assert mapping.translation_table(missing) is None

    def test_duplicate_database_replaces(self):
        mapping = MappingRegistry()
        first = _db()
        second = _db()
        mapping.add_database(first)
        mapping.add_database(second)
        assert mapping.database(URIRef(EX + "db")) is second
        assert len(mapping.databases()) == 1

    def test_class_maps(self):
        mapping = MappingRegistry()
        a = _StubClassMap("a")
        b = _StubClassMap("b")
        mapping.add_class_map(a)
        mapping.add_class_map(b)
        mapping.add_class_map(_StubClassMap("a"))
        assert mapping.class_map_resources() == [a.resource, b.resource]
        assert mapping.class_map(a.resource) is not a

    def test_translation_tables(self):
        mapping = MappingRegistry()
        table = TranslationTable(URIRef(EX + "t"))
        mapping.add_translation_table(table)
        assert mapping.translation_table(table.resource) is table
        assert mapping.translation_tables() == [table]

    def test_repr_counts(self):
        mapping = MappingRegistry("http://example.org/mapping")
        mapping.add_database(_db())
        assert "1 databases" in repr(mapping)


# ---------------------------------------------------------------------------
# Prefixes
# ---------------------------------------------------------------------------

class TestPrefixes:
    def test_default_d2rq_prefix(self):
        mapping = MappingRegistry()
        assert mapping.namespace_for("d2rq") == str(D2RQ)
        assert mapping.prefix_for(str(D2RQ)) == "d2rq"

    def test_bidirectional_lookup(self):
        mapping = MappingRegistry()
        mapping.set_prefix("shop", "http://shop.example.org/vocab#")
        assert mapping.namespace_for("shop") == "http://shop.example.org/vocab#"
        assert mapping.prefix_for("http://shop.example.org/vocab#") == "shop"
        assert mapping.prefixes()["shop"] == "http://shop.example.org/vocab#"

    def test_unknown_prefix(self):
        mapping = MappingRegistry()
        assert mapping.namespace_for("nope") is None
        assert mapping.prefix_for("http://nowhere.example.org/") is None

    def test_rebinding_prefix(self):
        mapping = MappingRegistry()
        mapping.set_prefix("ex", "http://one.example.org/")
        mapping.set_prefix("ex", "http://two.example.org/")
        assert mapping.namespace_for("ex") == "http://two.example.org/"

    def test_qname_and_expand(self):
        mapping = MappingRegistry()
        mapping.set_prefix("shop", "http://shop.example.org/vocab#")
        assert mapping.qname("http://shop.example.org/vocab#total") == "shop:total"
        assert mapping.qname("http://elsewhere.example.org/x") == "http://elsewhere.example.org/x"
        assert mapping.expand("shop:total") == "http://shop.example.org/vocab#total"

    def test_expand_unknown_prefix(self):
        with pytest.raises(ValueError):
            MappingRegistry().expand("nope:x")

    def test_expand_requires_prefix(self):
        with pytest.raises(ValueError):
            MappingRegistry().expand("total")

    def test_qname_prefers_longest_namespace(self):
        mapping = MappingRegistry()
        mapping.set_prefix("ex", "http://example.org/")
        mapping.set_prefix("exv", "http://example.org/vocab/")
        assert mapping.qname("http://example.org/vocab/total") == "exv:total"
        assert mapping.qname("http://example.org/other") == "ex:other"

    def test_qname_follows_rebinding(self):
        mapping = MappingRegistry()
        mapping.set_prefix("ex", "http://one.example.org/")
        assert mapping.qname("http://one.example.org/a") == "ex:a"
        mapping.set_prefix("ex", "http://two.example.org/")
        assert mapping.qname("http://one.example.org/a") == "http://one.example.org/a"
        assert mapping.qname("http://two.example.org/a") == "ex:a"

    def test_qname_does_not_invent_prefixes(self):
        mapping = MappingRegistry()
        mapping.qname("http://elsewhere.example.org/x")
        assert mapping.prefix_for("http://elsewhere.example.org/") is None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class TestValidate:
    def test_no_database(self):
        mapping = MappingRegistry()
        with pytest.raises(NoConnectionDescriptor) as exc_info:
            mapping.validate()
        assert exc_info.value.code == ErrorCode.MAPPING_NO_DATABASE

    def test_no_database_even_with_class_maps(self):
        mapping = MappingRegistry()
        mapping.add_class_map(_StubClassMap("a"))
        with pytest.raises(NoConnectionDescriptor):
            mapping.validate()

    def test_single_valid_database(self):
        mapping = MappingRegistry()
        mapping.add_database(_db())
        mapping.validate()

    def test_fixing_database_makes_mapping_valid(self):
        mapping = MappingRegistry()
        with pytest.raises(NoConnectionDescriptor):
            mapping.validate()
        db = ConnectionDescriptor(URIRef(EX + "db"), drivers=DriverRegistry())
        db.set_jdbc_dsn("jdbc:test://host/db")
        mapping.add_database(db)
        with pytest.raises(MissingDriver):
            mapping.validate()
        db.set_jdbc_driver("test.Driver")
        mapping.add_class_map(_StubClassMap("a"))
        mapping.add_translation_table(TranslationTable(URIRef(EX + "t")))
        mapping.validate()

    def test_invalid_database_reported(self):
        mapping = MappingRegistry()
        db = _db()
        db.set_odbc_dsn("DSN1")
        mapping.add_database(db)
        with pytest.raises(ConflictingConnectionMode):
            mapping.validate()

    def test_databases_checked_before_tables_and_class_maps(self):
        mapping = MappingRegistry()
        db = _db()
        db.set_odbc_dsn("DSN1")
        mapping.add_database(db)
        table = TranslationTable(URIRef(EX + "t"))
        table.set_href("file:a")
        table.set_translator_class("pkg.T")
        mapping.add_translation_table(table)
        mapping.add_class_map(_StubClassMap("a", error=ValueError("class map")))
        with pytest.raises(ConflictingConnectionMode):
            mapping.validate()

    def test_tables_checked_before_class_maps(self):
        mapping = MappingRegistry()
        mapping.add_database(_db())
        table = TranslationTable(URIRef(EX + "t"))
        table.set_href("file:a")
        table.set_translator_class("pkg.T")
        mapping.add_translation_table(table)
        mapping.add_class_map(_StubClassMap("a", error=ValueError("class map")))
        with pytest.raises(TranslationTableConflict):
            mapping.validate()

    def test_class_map_failure_stops_further_class_maps(self):
        log = []
        mapping = MappingRegistry()
        mapping.add_database(_db())
        mapping.add_class_map(_StubClassMap("a", error=ValueError("broken"), log=log))
        mapping.add_class_map(_StubClassMap("b", log=log))
        with pytest.raises(ValueError, match="broken"):
            mapping.validate()
        assert log == [URIRef(EX + "a")]

    def test_validate_does_not_connect_or_compile(self):
        mapping = MappingRegistry()
        db = _db()
        mapping.add_database(db)
        class_map = _StubClassMap("a")
        mapping.add_class_map(class_map)
        mapping.validate()
        mapping.validate()
        assert not db.is_connected
        assert class_map.compile_count == 0
        assert not mapping.is_compiled


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------

class TestCompiledProjectionRules:
    def test_concatenates_rules(self):
        mapping = MappingRegistry()
        db = _db()
        mapping.add_database(db)
        r1 = _rule(db, "orders.id", name="id")
        r2 = _rule(db, "orders.total", name="total")
        mapping.add_class_map(_StubClassMap("a", [r1]))
        mapping.add_class_map(_StubClassMap("b", [r2]))
        assert mapping.compiled_projection_rules() == (r1, r2)

    def test_no_class_maps(self):
        mapping = MappingRegistry()
        mapping.add_database(_db())
        assert mapping.compiled_projection_rules() == ()

    def test_result_is_cached(self):
        mapping = MappingRegistry()
        db = _db()
        class_map = _StubClassMap("a", [_rule(db, "orders.id")])
        mapping.add_class_map(class_map)
        first = mapping.compiled_projection_rules()
        second = mapping.compiled_projection_rules()
        assert first is second
        assert class_map.compile_count == 1
        assert mapping.is_compiled

    def test_cache_ignores_later_class_maps(self):
        mapping = MappingRegistry()
        db = _db()
        mapping.add_class_map(_StubClassMap("a", [_rule(db, "orders.id")]))
        first = mapping.compiled_projection_rules()
        late = _StubClassMap("late", [_rule(db, "orders.total")])
        mapping.add_class_map(late)
        assert mapping.compiled_projection_rules() is first
        assert len(first) == 1
        assert late.compile_count == 0

    def test_concurrent_first_access_compiles_once(self):
        mapping = MappingRegistry()
        db = _db()
        class_map = _StubClassMap("a", [_rule(db, "orders.id")], delay=0.05)
        mapping.add_class_map(class_map)
        barrier = threading.Barrier(10)
        results = []

        def read():
            barrier.wait()
            results.append(mapping.compiled_projection_rules())

        threads = [threading.Thread(target=read) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert class_map.compile_count == 1
        assert len(results) == 10
        assert all(r is results[0] for r in results)

    def test_unknown_column_fails_at_compile_time(self):
        mapping = MappingRegistry()
        db = ConnectionDescriptor(URIRef(EX + "db"), drivers=DriverRegistry())
        db.set_jdbc_dsn("jdbc:test://host/db")
        db.set_jdbc_driver("sqlite3")
        db.add_numeric_column("orders.id")
        mapping.add_database(db)
        mapping.add_class_map(_StubClassMap("a", [_rule(db, "orders.total")]))
        mapping.validate()
        with pytest.raises(UnknownColumn) as exc_info:
            mapping.compiled_projection_rules()
        assert exc_info.value.attribute == Attribute("orders", "total")
        assert not mapping.is_compiled

    def test_compilation_connects_source_database(self):
        mapping = MappingRegistry()
        db = _db()
        mapping.add_database(db)
        mapping.add_class_map(_StubClassMap("a", [_rule(db, "orders.id")]))
        mapping.compiled_projection_rules()
        assert db.is_connected
