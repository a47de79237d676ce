"""Orders — end-to-end demonstration of the mapping pipeline.

Three phases, each shown with a passing and a failing mapping:

  LOAD      Objects are registered; duplicate scalar fields are rejected
            immediately.
  VALIDATE  The registry checks every database, translation table and
            class map, failing on the first inconsistency.
  COMPILE   Class maps are compiled once; rules reading unknown columns
            are rejected here, before any query runs.
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from rdbmap.drivers import DriverRegistry
from rdbmap.errors import MappingError
from rdbmap.log import configure_logging

from .domain import SHOP, build_mapping


def print_header(title: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print(f"{'=' * 60}")


def run_valid_mapping(drivers: DriverRegistry) -> None:
    print_header("Scenario A: Valid mapping")
    mapping = build_mapping(drivers)
    print(f"  {mapping}")
    mapping.validate()
    print("  Validation: PASS")

    rules = mapping.compiled_projection_rules()
    print(f"  Compiled {len(rules)} projection rule(s):")
    for rule in rules:
        print(f"    - {mapping.qname(rule.name)}")
    print(f"  Drivers registered: {', '.join(drivers.registered())}")


def run_conflicting_mode(drivers: DriverRegistry) -> None:
    print_header("Scenario B: ODBC and JDBC combined")
    mapping = build_mapping(drivers)
    mapping.databases()[0].set_odbc_dsn("DSN1")
    try:
        mapping.validate()
    except MappingError as exc:
        print(f"  Validation: FAIL [{exc.code.value}]")
        print(f"    {exc.message}")


def run_unknown_column(drivers: DriverRegistry) -> None:
    print_header("Scenario C: Rule reading an unclassified column")
    mapping = build_mapping(drivers)
    order = mapping.class_map(mapping.class_map_resources()[1])
    order.add_bridge(SHOP + "discount", "orders.discount")
    mapping.validate()
    print("  Validation: PASS")
    try:
        mapping.compiled_projection_rules()
    except MappingError as exc:
        print(f"  Compilation: FAIL [{exc.code.value}]")
        print(f"    {exc.message}")


def main() -> None:
    configure_logging("INFO")
    drivers = DriverRegistry()
    run_valid_mapping(drivers)
    run_conflicting_mode(drivers)
    run_unknown_column(drivers)


if __name__ == "__main__":
    main()
