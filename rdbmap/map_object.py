"""Base class of configuration objects loaded from a mapping."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from rdflib import URIRef

from .errors import DuplicateField, ErrorCode, MissingField
from .types import Resource
from .vocab import qname


class MapObject(ABC):
    """A configuration object identified by an RDF resource.

    Map objects are mutated only while a mapping is loaded. Scalar fields are
    first-write-wins: assigning one twice is a configuration error rather
    than a silent overwrite.
    """

    # Vocabulary class shown in reprs and messages, e.g. d2rq:Database
    vocabulary_class: URIRef | None = None

    def __init__(self, resource: Resource) -> None:
        if resource is None:
            raise ValueError("Map objects require a resource")
        self._resource = resource

    @property
    def resource(self) -> Resource:
        return self._resource

    @abstractmethod
    def validate(self) -> None:
        """Raise a MappingError if the object is inconsistent."""

    def assert_not_yet_defined(
        self,
        current: Any,
        prop: URIRef,
        code: ErrorCode = ErrorCode.MAPOBJECT_DUPLICATE_FIELD,
    ) -> None:
        if current is None:
            return
        raise DuplicateField(f"Duplicate {qname(prop)} for {self}", code)

    def assert_has_been_defined(
        self,
        current: Any,
        prop: URIRef,
        code: ErrorCode = ErrorCode.MAPOBJECT_MISSING_FIELD,
    ) -> None:
        if current is not None:
            return
        raise MissingField(f"Missing {qname(prop)} for {self}", code)

    def __repr__(self) -> str:
        label = qname(self.vocabulary_class) if self.vocabulary_class is not None else type(self).__name__
        return f"{label} {self._resource.n3()}"
