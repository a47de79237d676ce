"""Compilation pipeline — class maps to a flat, type-checked rule list.

Pure functions: nothing here mutates its inputs. Caching of the result is
the registry's job.

The type check asks each rule's database for the type of every attribute
the rule reads. Its only purpose is to fail early: a mapping that refers to
an unknown column must be rejected while compiling, not when the query
engine later runs SQL against it.
"""

from __future__ import annotations

import logging
from typing import Iterable

from .types import ClassMap, ColumnType, ProjectionRule

logger = logging.getLogger(__name__)


def collect_projection_rules(class_maps: Iterable[ClassMap]) -> list[ProjectionRule]:
    """Concatenate the compiled rules of every class map, in order."""
    rules: list[ProjectionRule] = []
    for class_map in class_maps:
        compiled = list(class_map.compiled_projection_rules())
        logger.debug("%s compiled to %d rule(s)", class_map, len(compiled))
        rules.extend(compiled)
    return rules


def assert_has_column_types(rule: ProjectionRule) -> list[ColumnType]:
    """Resolve the type of every attribute *rule* requires.

    Aliased attributes are resolved to their original table first.
    Raises UnknownColumn for an attribute the database cannot classify.
    """
    connection = rule.database.connection()
    return [
        connection.column_type(rule.aliases.original_of(attribute))
        for attribute in rule.required_attributes()
    ]


def compile_projection_rules(class_maps: Iterable[ClassMap]) -> tuple[ProjectionRule, ...]:
    """Compile and type-check all rules of *class_maps*."""
    rules = collect_projection_rules(class_maps)
    for rule in rules:
        assert_has_column_types(rule)
    return tuple(rules)
