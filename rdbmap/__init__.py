"""rdbmap — mapping registry and compiler for relational-to-RDF mappings.

A mapping is a set of configuration objects loaded from a mapping file:
database connection descriptors, class maps and translation tables. This
package registers them, validates them as a whole, and compiles the class
maps into projection rules for a query engine:

- Connection descriptors: connection parameters, column type hints, and one
  lazily built connection handle per database
- Driver registry: process-wide, idempotent loading of database drivers
- Mapping registry: resource-keyed registries, prefixes, validation
- Compiler: class maps → projection rules, with an early column type check

The pipeline is split into three phases:

  Load     — objects and prefixes are added (single-threaded)
  Validate — MappingRegistry.validate() rejects inconsistent configuration
  Compile  — MappingRegistry.compiled_projection_rules() compiles once and
             rejects rules that read unknown columns

Parsing mapping files and running SQL are left to the caller.
"""
