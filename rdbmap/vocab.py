"""Mapping vocabulary terms.

Terms are used to identify map object classes and properties in error
messages and reprs, and as the default namespace of a mapping's prefix table.
"""

from __future__ import annotations

from rdflib import Graph, Namespace, URIRef
from rdflib.namespace import RDF, RDFS, XSD, NamespaceManager

D2RQ = Namespace("http://www.wiwiss.fu-berlin.de/suhl/bizer/D2RQ/0.1#")
MAP = Namespace("http://rdbmap.example.org/map/")

# Prefixes every new mapping starts with
DEFAULT_PREFIXES: dict[str, Namespace] = {
    "d2rq": D2RQ,
    "rdf": Namespace(str(RDF)),
    "rdfs": Namespace(str(RDFS)),
    "xsd": Namespace(str(XSD)),
}

_message_namespaces = NamespaceManager(Graph(), bind_namespaces="none")
_message_namespaces.bind("d2rq", D2RQ)


def qname(term: URIRef) -> str:
    """Render a vocabulary term as ``d2rq:localName`` when it belongs to D2RQ."""
    try:
        return _message_namespaces.curie(URIRef(term), generate=False)
    except (KeyError, ValueError):
        return URIRef(term).n3()
