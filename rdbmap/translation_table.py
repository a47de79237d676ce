"""Translation table — a d2rq:TranslationTable from the mapping.

A table is defined in exactly one way: by inline translations, by an
external ``href`` to a translation file, or by a translator class. Value
lookup is performed by the query layer; this object only records and
validates the definition.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ErrorCode, TranslationTableConflict
from .map_object import MapObject
from .types import Resource
from .vocab import D2RQ


@dataclass(frozen=True)
class Translation:
    """A single database value ↔ RDF value pair."""
    db_value: str
    rdf_value: str

    def __repr__(self) -> str:
        return f"Translation({self.db_value!r} <-> {self.rdf_value!r})"


class TranslationTable(MapObject):

    vocabulary_class = D2RQ.TranslationTable

    def __init__(self, resource: Resource) -> None:
        super().__init__(resource)
        self.translations: list[Translation] = []
        self.href: str | None = None
        self.translator_class: str | None = None

    def add_translation(self, db_value: str, rdf_value: str) -> Translation:
        translation = Translation(db_value=db_value, rdf_value=rdf_value)
        self.translations.append(translation)
        return translation

    def set_href(self, href: str) -> None:
        self.assert_not_yet_defined(self.href, D2RQ.href, ErrorCode.TRANSLATIONTABLE_DUPLICATE_HREF)
        self.href = href

    def set_translator_class(self, class_name: str) -> None:
        self.assert_not_yet_defined(
            self.translator_class, D2RQ.javaClass, ErrorCode.TRANSLATIONTABLE_DUPLICATE_JAVACLASS
        )
        self.translator_class = class_name

    def __len__(self) -> int:
        return len(self.translations)

    def validate(self) -> None:
        if self.translations and self.translator_class is not None:
            raise TranslationTableConflict(
                f"Can't combine d2rq:translation with d2rq:javaClass in {self}",
                ErrorCode.TRANSLATIONTABLE_TRANSLATION_AND_JAVACLASS,
            )
        if self.translations and self.href is not None:
            raise TranslationTableConflict(
                f"Can't combine d2rq:translation with d2rq:href in {self}",
                ErrorCode.TRANSLATIONTABLE_TRANSLATION_AND_HREF,
            )
        if self.href is not None and self.translator_class is not None:
            raise TranslationTableConflict(
                f"Can't combine d2rq:href with d2rq:javaClass in {self}",
                ErrorCode.TRANSLATIONTABLE_HREF_AND_JAVACLASS,
            )
