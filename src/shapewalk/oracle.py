from __future__ import annotations

import logging
from typing import Protocol, Sequence

from rdflib import BNode, Dataset, Graph
from rdflib.term import Node

logger = logging.getLogger(__name__)


class ConformanceOracle(Protocol):
    def conforms(self, graph: Graph, focus_nodes: Sequence[Node], shapes: Sequence[Node]) -> bool:
        ...


def flatten(dataset: Dataset) -> Graph:
    """
    Union of every partition of `dataset` as one plain graph.

    Blank nodes come out as their skolem IRIs (rdflib's default authority),
    so a blank-node resource or shape can still be named as a focus node or
    shape through `skolem()`.
    """
    g = Graph()
    for s, p, o, _ctx in dataset.quads((None, None, None, None)):
        g.add((s, p, o))
    return g.skolemize()


def skolem(term: Node) -> Node:
    """The name `term` carries in a graph produced by flatten()."""
    if isinstance(term, BNode):
        return term.skolemize()
    return term


class PyShaclOracle:
    """
    Conformance check backed by pySHACL.

    The merged graph is both data and shapes graph, so shapes imported next
    to the data and data embedded in shape documents are all visible.
    pySHACL only takes IRIs as focus nodes and shapes, so the graph is
    expected to come from flatten().
    """

    def __init__(self, inference: str = "none", allow_warnings: bool = False) -> None:
        self.inference = inference
        self.allow_warnings = allow_warnings

    def conforms(self, graph: Graph, focus_nodes: Sequence[Node], shapes: Sequence[Node]) -> bool:
        from pyshacl import validate as pyshacl_validate

        focus = [skolem(n) for n in focus_nodes]
        use_shapes = [skolem(s) for s in shapes]
        conforms, _results_graph, _results_text = pyshacl_validate(
            graph,
            shacl_graph=graph,
            inference=self.inference,
            focus_nodes=focus,
            use_shapes=use_shapes,
            allow_warnings=self.allow_warnings,
            abort_on_first=False,
        )
        logger.debug("pyshacl %s against %s: %s", focus, use_shapes, conforms)
        return bool(conforms)
