from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from rdflib import Dataset, Graph
from rdflib.term import Node

from .errors import RDFParseError

Triple = tuple[Node, Node, Node]


class RdfFormat(Enum):
    TURTLE = "turtle"  # Turtle, TriG, N-Triples and N-Quads
    RDF_XML = "xml"
    JSON_LD = "json-ld"


_JSON_START = re.compile(r"^\s*\{")
_XML_START = re.compile(r"^\s*<\?xml")


def guess_format(text: str) -> RdfFormat:
    """
    Classify a document by its first characters.

    Servers hand out RDF as text/plain often enough that the Content-Type
    header is useless here, so we only look at the payload.
    """
    if _JSON_START.match(text):
        return RdfFormat.JSON_LD
    if _XML_START.match(text):
        return RdfFormat.RDF_XML
    return RdfFormat.TURTLE


@dataclass(frozen=True)
class ParsedDocument:
    triples: tuple[Triple, ...]
    # (prefix, namespace IRI) pairs declared by the document, default prefix excluded
    prefixes: tuple[tuple[str, str], ...] = ()

    def __len__(self) -> int:
        return len(self.triples)


def _declared_prefixes(g: Graph) -> tuple[tuple[str, str], ...]:
    return tuple((p, str(ns)) for p, ns in g.namespaces() if p)


_RDFLIB_BINDINGS = frozenset(_declared_prefixes(Dataset()))


def _parse_single(text: str, fmt: str, base: Optional[str]) -> ParsedDocument:
    # no default bindings: only what the document declares should show up
    g = Graph(bind_namespaces="none")
    g.parse(data=text, format=fmt, publicID=base)
    return ParsedDocument(triples=tuple(g), prefixes=_declared_prefixes(g))


def _parse_quads(text: str, fmt: str, base: Optional[str]) -> ParsedDocument:
    ds = Dataset()
    ds.parse(data=text, format=fmt, publicID=base)
    # graph names are dropped, the importer decides where triples go
    triples = tuple((s, p, o) for s, p, o, _g in ds.quads((None, None, None, None)))
    if fmt != "trig":
        return ParsedDocument(triples=triples)
    # a Dataset always carries rdflib's own bindings, keep only the rest
    prefixes = tuple((p, ns) for p, ns in _declared_prefixes(ds) if (p, ns) not in _RDFLIB_BINDINGS)
    return ParsedDocument(triples=triples, prefixes=prefixes)


def parse_rdf(text: str, base: Optional[str] = None) -> ParsedDocument:
    """
    Parse an RDF document of any supported serialization.

    Turtle-family documents are read as Turtle first (which also covers
    N-Triples), then as TriG and as N-Quads when that fails. Every parser
    failure surfaces as RDFParseError, carrying the Turtle error.
    """
    fmt = guess_format(text)

    if fmt is RdfFormat.JSON_LD:
        try:
            return _parse_quads(text, "json-ld", base)
        except Exception as e:
            raise RDFParseError(fmt.value, str(e), base) from e

    if fmt is RdfFormat.RDF_XML:
        try:
            return _parse_single(text, "xml", base)
        except Exception as e:
            raise RDFParseError(fmt.value, str(e), base) from e

    try:
        return _parse_single(text, "turtle", base)
    except Exception as turtle_error:
        for quad_format in ("trig", "nquads"):
            try:
                return _parse_quads(text, quad_format, base)
            except Exception:
                continue
        raise RDFParseError(fmt.value, str(turtle_error), base) from turtle_error
