from __future__ import annotations

import logging
from typing import Iterator, Optional

from rdflib import Dataset, Literal, URIRef
from rdflib.term import Node

from .conformance import ConformanceMap
from .importer import RDFImporter
from .namespaces import DATA_GRAPH, SHAPES_GRAPH
from .oracle import ConformanceOracle, PyShaclOracle, flatten
from .shapes import ShapeResolver, build_list_index

logger = logging.getLogger(__name__)

ChildVisits = Iterator[tuple[Node, Node]]


class TraversalEngine:
    """
    Walks from a root (resource, shape) pair into linked resources.

    A resource is checked against a shape; when it conforms, every property
    declared on the shape or on the shapes it inherits from is followed and
    each value is visited with the property's value shapes. Visits happen
    depth first in a fixed order, the first conforming shape of a resource is
    the one recorded, and each (resource, shape) pair is tried at most once.
    """

    def __init__(self, dataset: Dataset, oracle: ConformanceOracle, resolver: Optional[ShapeResolver] = None) -> None:
        self.shapes_graph = dataset.graph(SHAPES_GRAPH)
        self.data_graph = dataset.graph(DATA_GRAPH)
        self.resolver = resolver or ShapeResolver(self.shapes_graph, build_list_index(self.shapes_graph))
        self.oracle = oracle
        self.oracle_graph = flatten(dataset)
        self.visited: set[tuple[str, str]] = set()
        self.results = ConformanceMap()

    def run(self, resource: Node, shape: Node) -> ConformanceMap:
        # explicit stack instead of recursion: data graphs can nest deeper
        # than the interpreter's recursion limit
        root = self._enter(resource, shape)
        stack: list[ChildVisits] = [root] if root is not None else []
        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                continue
            visits = self._enter(*child)
            if visits is not None:
                stack.append(visits)
        return self.results

    def _enter(self, resource: Node, shape: Node) -> Optional[ChildVisits]:
        key = (resource.n3(), shape.n3())
        if key in self.visited or resource in self.results:
            return None
        self.visited.add(key)

        if not self.oracle.conforms(self.oracle_graph, [resource], [shape]):
            logger.debug("%s does not conform to %s", resource, shape)
            return None

        self.results.record(resource, shape)
        return self._children(resource, shape)

    def _children(self, resource: Node, shape: Node) -> ChildVisits:
        for node_shape in [shape, *self.resolver.closure(shape, True)]:
            for prop in self.resolver.properties(node_shape):
                path = self.resolver.path(prop)
                if path is None:
                    continue
                value_shapes = self.resolver.value_shapes(prop)
                if not value_shapes:
                    continue
                for value in list(self.data_graph.objects(resource, path)):
                    if isinstance(value, Literal):
                        continue
                    for value_shape in value_shapes:
                        yield value, value_shape


def validate(
    shapes_text: str,
    shape_id: str,
    data_text: str,
    resource_id: str,
    clear_cache: bool = False,
    importer: Optional[RDFImporter] = None,
    oracle: Optional[ConformanceOracle] = None,
) -> dict[str, str]:
    """
    Resolve which shape `resource_id` and every resource reachable from it
    conform to, starting from `shape_id`.

    Returns {resource IRI: shape IRI}; empty when the root does not conform.
    """
    importer = importer or RDFImporter()
    oracle = oracle or PyShaclOracle()

    if clear_cache:
        importer.clear()

    dataset = Dataset()
    seen_urls: set[str] = set()
    importer.import_document(shapes_text, SHAPES_GRAPH, dataset, seen_urls)
    importer.import_document(data_text, DATA_GRAPH, dataset, seen_urls)

    engine = TraversalEngine(dataset, oracle)
    return engine.run(URIRef(resource_id), URIRef(shape_id)).as_dict()
