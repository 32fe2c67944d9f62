from __future__ import annotations

from enum import Enum
from typing import Iterator, Optional

from rdflib import Graph, URIRef
from rdflib.term import Node

from .namespaces import RDF, SH


class ShapeEdge(Enum):
    """Ways a shape can pull in other shapes, in the order they are resolved."""

    QUALIFIED_VALUE = SH.qualifiedValueShape
    NODE = SH.node
    AND = SH["and"]
    OR = SH["or"]
    XONE = SH.xone

    @property
    def is_list(self) -> bool:
        return self in (ShapeEdge.AND, ShapeEdge.OR, ShapeEdge.XONE)


def build_list_index(graph: Graph) -> dict[Node, list[Node]]:
    """Map every RDF collection node in `graph` to its members, in order."""
    index: dict[Node, list[Node]] = {}
    for head in set(graph.subjects(RDF.first, None)):
        members: list[Node] = []
        seen: set[Node] = set()
        node: Optional[Node] = head
        # stop on malformed or circular rdf:rest chains
        while node is not None and node != RDF.nil and node not in seen:
            seen.add(node)
            first = graph.value(node, RDF.first)
            if first is None:
                break
            members.append(first)
            node = graph.value(node, RDF.rest)
        index[head] = members
    return index


class ShapeResolver:
    """
    Resolves shape composition against the shapes graph.

    `closure(shape, True)` is the full inheritance closure of a node shape,
    used to find every sh:property that applies to a focus node.
    `value_shapes(prop)` is what a value reached through a property shape has
    to be checked against; deeper inheritance of those shapes is resolved
    later, when the value itself is visited.
    """

    def __init__(self, shapes_graph: Graph, list_index: Optional[dict[Node, list[Node]]] = None) -> None:
        self.graph = shapes_graph
        self.lists = list_index if list_index is not None else build_list_index(shapes_graph)

    def edges(self, shape: Node) -> Iterator[tuple[ShapeEdge, Node]]:
        for edge in ShapeEdge:
            for target in self.graph.objects(shape, edge.value):
                if edge.is_list:
                    for member in self.lists.get(target, []):
                        yield edge, member
                else:
                    yield edge, target

    def closure(self, shape: Node, include_transitive: bool, visited: Optional[set[Node]] = None) -> list[Node]:
        """Shapes `shape` is composed from; `shape` itself is not included."""
        if visited is None:
            visited = {shape}
        result: list[Node] = []
        for _edge, target in self.edges(shape):
            if target in visited:
                continue
            visited.add(target)
            result.append(target)
            if include_transitive:
                result.extend(self.closure(target, True, visited))
        return result

    def properties(self, shape: Node) -> list[Node]:
        return list(self.graph.objects(shape, SH.property))

    def path(self, property_shape: Node) -> Optional[URIRef]:
        # only plain predicate paths; sequence/inverse/alternative paths are skipped
        path = self.graph.value(property_shape, SH.path)
        return path if isinstance(path, URIRef) else None

    def value_shapes(self, property_shape: Node) -> list[Node]:
        result: list[Node] = []
        for shape in self.closure(property_shape, False):
            for candidate in [shape, *self.closure(shape, False)]:
                if candidate not in result:
                    result.append(candidate)
        return result
