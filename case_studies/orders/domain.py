"""Orders — mapping definitions for the case study.

A small shop database exposed as RDF:

  customers(id, name, email, signup_date)
  orders(id, customer_id, total, placed_on)

One database, two class maps (Customer, Order), one translation table for
order status codes. The class maps here are deliberately simple: each
property bridge compiles to one projection rule reading its columns.
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from dataclasses import dataclass, field

from rdflib import URIRef

from rdbmap.database import ConnectionDescriptor
from rdbmap.drivers import DriverRegistry
from rdbmap.map_object import MapObject
from rdbmap.mapping import MappingRegistry
from rdbmap.translation_table import TranslationTable
from rdbmap.types import NO_ALIASES, AliasMap, Attribute, Projection
from rdbmap.vocab import D2RQ, MAP

SHOP = "http://shop.example.org/vocab#"


@dataclass
class PropertyBridge:
    """A property of a class map's instances, read from one or more columns."""
    property: URIRef
    columns: list[Attribute] = field(default_factory=list)
    aliases: AliasMap = NO_ALIASES


class SimpleClassMap(MapObject):
    """A d2rq:ClassMap whose bridges compile one-to-one into projections."""

    vocabulary_class = D2RQ.ClassMap

    def __init__(self, resource: URIRef) -> None:
        super().__init__(resource)
        self.database: ConnectionDescriptor | None = None
        self.bridges: list[PropertyBridge] = []

    def set_database(self, database: ConnectionDescriptor) -> None:
        self.assert_not_yet_defined(self.database, D2RQ.dataStorage)
        self.database = database

    def add_bridge(self, prop: str, *columns: str, aliases: AliasMap = NO_ALIASES) -> PropertyBridge:
        bridge = PropertyBridge(
            property=URIRef(prop),
            columns=[Attribute.parse(c) for c in columns],
            aliases=aliases,
        )
        self.bridges.append(bridge)
        return bridge

    def validate(self) -> None:
        self.assert_has_been_defined(self.database, D2RQ.dataStorage)

    def compiled_projection_rules(self) -> list[Projection]:
        return [
            Projection(
                name=str(bridge.property),
                database=self.database,
                attributes=frozenset(bridge.columns),
                aliases=bridge.aliases,
            )
            for bridge in self.bridges
        ]


def build_database(drivers: DriverRegistry | None = None) -> ConnectionDescriptor:
    """The shop database with column type hints for every mapped column."""
    db = ConnectionDescriptor(MAP.shopDB, drivers=drivers)
    db.set_jdbc_dsn("jdbc:sqlite::memory:")
    db.set_jdbc_driver("sqlite3")

    for column in ("customers.name", "customers.email"):
        db.add_text_column(column)
    for column in ("customers.id", "orders.id", "orders.customer_id", "orders.total"):
        db.add_numeric_column(column)
    for column in ("customers.signup_date", "orders.placed_on"):
        db.add_date_column(column)
    return db


def build_status_table() -> TranslationTable:
    table = TranslationTable(MAP.orderStatus)
    table.add_translation("P", SHOP + "Pending")
    table.add_translation("S", SHOP + "Shipped")
    table.add_translation("D", SHOP + "Delivered")
    return table


def build_mapping(drivers: DriverRegistry | None = None) -> MappingRegistry:
    """Build the complete, valid orders mapping."""
    mapping = MappingRegistry("http://shop.example.org/mapping")
    mapping.set_prefix("shop", SHOP)
    mapping.set_prefix("map", str(MAP))

    db = build_database(drivers)
    mapping.add_database(db)
    mapping.add_translation_table(build_status_table())

    customer = SimpleClassMap(MAP.Customer)
    customer.set_database(db)
    customer.add_bridge(SHOP + "name", "customers.name")
    customer.add_bridge(SHOP + "email", "customers.email")
    customer.add_bridge(SHOP + "since", "customers.signup_date")
    mapping.add_class_map(customer)

    order = SimpleClassMap(MAP.Order)
    order.set_database(db)
    order.add_bridge(SHOP + "total", "orders.total")
    order.add_bridge(SHOP + "placedOn", "orders.placed_on")
    # Buyer name read through an alias of customers
    order.add_bridge(
        SHOP + "buyerName", "buyer.name", "orders.customer_id",
        aliases=AliasMap.of(buyer="customers"),
    )
    mapping.add_class_map(order)
    return mapping
