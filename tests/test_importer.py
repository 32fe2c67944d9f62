"""Tests for the RDF importer: merging, owl:imports following and caching."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest
from rdflib import Dataset, Literal, URIRef
from rdflib.namespace import OWL

from shapewalk.errors import RDFParseError
from shapewalk.fetch import FetchCache, PrefixMap
from shapewalk.importer import RDFImporter
from shapewalk.namespaces import DATA_GRAPH, SHAPES_GRAPH

from stubs import StubFetcher

EX = "http://example.org/"
REMOTE = "http://remote.example/vocab.ttl"
OTHER = "http://remote.example/other.ttl"

REMOTE_DOC = """
@prefix ex: <http://example.org/> .
ex:RemoteShape ex:declaredIn ex:remote .
"""

OTHER_DOC = """
@prefix ex: <http://example.org/> .
ex:OtherShape ex:declaredIn ex:other .
"""


def _importer(documents=None, **kwargs):
    fetcher = StubFetcher(documents or {})
    importer = RDFImporter(fetcher=fetcher, cache=FetchCache(), prefixes=PrefixMap(), **kwargs)
    return importer, fetcher


def _importing(*targets: str) -> str:
    lines = ["@prefix owl: <http://www.w3.org/2002/07/owl#> ."]
    lines += [f"<http://example.org/onto> owl:imports <{t}> ." for t in targets]
    return "\n".join(lines) + "\n"


def _has(dataset: Dataset, graph: URIRef, s: str, p: str, o: str) -> bool:
    return (URIRef(EX + s), URIRef(EX + p), URIRef(EX + o)) in dataset.graph(graph)


# ---------------------------------------------------------------------------
# Root documents
# ---------------------------------------------------------------------------

class TestRootDocuments:
    def test_triples_land_in_target_graph(self):
        importer, _ = _importer()
        ds = Dataset()
        importer.import_document("<http://example.org/a> <http://example.org/p> <http://example.org/b> .", DATA_GRAPH, ds)

        assert _has(ds, DATA_GRAPH, "a", "p", "b")
        assert len(ds.graph(SHAPES_GRAPH)) == 0

    def test_root_parse_failure_propagates(self):
        importer, _ = _importer()
        with pytest.raises(RDFParseError):
            importer.import_document("@prefix ex: <http://example.org/> .\nex:a ex:b .", SHAPES_GRAPH, Dataset())

    def test_prefixes_are_recorded(self):
        importer, _ = _importer()
        importer.import_document(
            "@prefix ex: <http://example.org/> .\n@prefix : <http://default.example/> .\nex:a ex:p ex:b .",
            SHAPES_GRAPH,
            Dataset(),
        )
        assert importer.prefixes.get("ex") == EX
        assert importer.prefixes.get("") is None

    def test_last_prefix_declaration_wins(self):
        importer, _ = _importer()
        importer.import_document("@prefix ex: <http://one.example/> .\nex:a ex:p ex:b .", SHAPES_GRAPH, Dataset())
        importer.import_document("@prefix ex: <http://two.example/> .\nex:a ex:p ex:b .", SHAPES_GRAPH, Dataset())
        assert importer.prefixes.get("ex") == "http://two.example/"


# ---------------------------------------------------------------------------
# owl:imports
# ---------------------------------------------------------------------------

class TestOwlImports:
    def test_import_is_merged_into_importing_partition(self):
        importer, fetcher = _importer({REMOTE: REMOTE_DOC})
        ds = Dataset()
        importer.import_document(_importing(REMOTE), SHAPES_GRAPH, ds)

        assert fetcher.count(REMOTE) == 1
        assert _has(ds, SHAPES_GRAPH, "RemoteShape", "declaredIn", "remote")
        assert not _has(ds, DATA_GRAPH, "RemoteShape", "declaredIn", "remote")
        # the owl:imports statement itself is kept
        assert (URIRef(EX + "onto"), OWL.imports, URIRef(REMOTE)) in ds.graph(SHAPES_GRAPH)

    def test_trig_import_is_merged(self):
        trig = "@prefix ex: <http://example.org/> .\nex:g { ex:RemoteShape ex:declaredIn ex:trig . }\n"
        importer, _ = _importer({REMOTE: trig})
        ds = Dataset()
        importer.import_document(_importing(REMOTE), SHAPES_GRAPH, ds)

        assert _has(ds, SHAPES_GRAPH, "RemoteShape", "declaredIn", "trig")

    def test_imports_are_followed_transitively(self):
        chained = "@prefix owl: <http://www.w3.org/2002/07/owl#> .\n" \
                  f"<http://remote.example/vocab> owl:imports <{OTHER}> .\n" + REMOTE_DOC
        importer, fetcher = _importer({REMOTE: chained, OTHER: OTHER_DOC})
        ds = Dataset()
        importer.import_document(_importing(REMOTE), SHAPES_GRAPH, ds)

        assert fetcher.count(OTHER) == 1
        assert _has(ds, SHAPES_GRAPH, "OtherShape", "declaredIn", "other")

    def test_same_url_is_fetched_once_per_request(self):
        importer, fetcher = _importer({REMOTE: REMOTE_DOC})
        ds, seen = Dataset(), set()
        # imported twice by the shapes document and again by the data document
        importer.import_document(_importing(REMOTE, REMOTE), SHAPES_GRAPH, ds, seen)
        importer.import_document(_importing(REMOTE), DATA_GRAPH, ds, seen)

        assert fetcher.calls == [REMOTE]
        assert seen == {REMOTE}
        # merged once: only into the partition that imported it first
        assert _has(ds, SHAPES_GRAPH, "RemoteShape", "declaredIn", "remote")
        assert not _has(ds, DATA_GRAPH, "RemoteShape", "declaredIn", "remote")

    def test_import_cycles_terminate(self):
        a = "http://remote.example/a.ttl"
        b = "http://remote.example/b.ttl"
        importer, fetcher = _importer({a: _importing(b), b: _importing(a)})
        importer.import_document(_importing(a), SHAPES_GRAPH, Dataset())

        assert fetcher.calls.count(a) == 1
        assert fetcher.calls.count(b) == 1

    def test_prefixed_import_is_expanded(self):
        doc = (
            "@prefix owl: <http://www.w3.org/2002/07/owl#> .\n"
            "@prefix remote: <http://remote.example/> .\n"
            '<http://example.org/onto> owl:imports "remote:vocab.ttl" .\n'
        )
        importer, fetcher = _importer({REMOTE: REMOTE_DOC})
        ds = Dataset()
        importer.import_document(doc, SHAPES_GRAPH, ds)

        assert fetcher.calls == [REMOTE]
        assert _has(ds, SHAPES_GRAPH, "RemoteShape", "declaredIn", "remote")

    def test_non_http_imports_are_not_fetched(self):
        importer, fetcher = _importer()
        ds = Dataset()
        importer.import_document(_importing("urn:example:vocab"), SHAPES_GRAPH, ds)

        assert fetcher.calls == []
        assert (URIRef(EX + "onto"), OWL.imports, URIRef("urn:example:vocab")) in ds.graph(SHAPES_GRAPH)

    def test_disabled_imports_are_plain_facts(self):
        importer, fetcher = _importer({REMOTE: REMOTE_DOC}, follow_imports=False)
        ds = Dataset()
        importer.import_document(_importing(REMOTE), SHAPES_GRAPH, ds)

        assert fetcher.calls == []
        assert (URIRef(EX + "onto"), OWL.imports, URIRef(REMOTE)) in ds.graph(SHAPES_GRAPH)
        assert not _has(ds, SHAPES_GRAPH, "RemoteShape", "declaredIn", "remote")


# ---------------------------------------------------------------------------
# Failure isolation
# ---------------------------------------------------------------------------

class TestImportFailures:
    def test_fetch_failure_is_isolated(self):
        missing = "http://remote.example/missing.ttl"
        importer, fetcher = _importer({REMOTE: REMOTE_DOC})
        ds = Dataset()
        importer.import_document(_importing(missing, REMOTE), SHAPES_GRAPH, ds)

        assert fetcher.count(missing) == 1
        assert _has(ds, SHAPES_GRAPH, "RemoteShape", "declaredIn", "remote")

    def test_parse_failure_of_import_is_isolated(self):
        broken = "http://remote.example/broken.ttl"
        importer, _ = _importer({REMOTE: REMOTE_DOC, broken: "@prefix ex: <http://example.org/> .\nex:a ex:b ."})
        ds = Dataset()
        importer.import_document(_importing(broken, REMOTE), SHAPES_GRAPH, ds)

        assert _has(ds, SHAPES_GRAPH, "RemoteShape", "declaredIn", "remote")

    def test_root_triples_survive_failed_imports(self):
        importer, _ = _importer()
        ds = Dataset()
        importer.import_document(_importing("http://remote.example/missing.ttl"), SHAPES_GRAPH, ds)
        assert len(ds.graph(SHAPES_GRAPH)) == 1


# ---------------------------------------------------------------------------
# Cache lifetime
# ---------------------------------------------------------------------------

class TestFetchCacheLifetime:
    def test_cache_is_reused_across_requests(self):
        importer, fetcher = _importer({REMOTE: REMOTE_DOC})
        for _ in range(3):
            ds = Dataset()
            importer.import_document(_importing(REMOTE), SHAPES_GRAPH, ds, set())
            assert _has(ds, SHAPES_GRAPH, "RemoteShape", "declaredIn", "remote")

        assert fetcher.count(REMOTE) == 1

    def test_clear_forces_refetch(self):
        importer, fetcher = _importer({REMOTE: REMOTE_DOC})
        importer.import_document(_importing(REMOTE), SHAPES_GRAPH, Dataset(), set())
        importer.clear()
        importer.import_document(_importing(REMOTE), SHAPES_GRAPH, Dataset(), set())

        assert fetcher.count(REMOTE) == 2

    def test_clear_drops_prefixes(self):
        importer, _ = _importer()
        importer.import_document("@prefix ex: <http://example.org/> .\nex:a ex:p ex:b .", SHAPES_GRAPH, Dataset())
        importer.clear()
        assert importer.prefixes.get("ex") is None

    def test_failed_fetch_is_cached_until_cleared(self):
        missing = "http://remote.example/missing.ttl"
        importer, fetcher = _importer()
        importer.import_document(_importing(missing), SHAPES_GRAPH, Dataset(), set())
        importer.import_document(_importing(missing), SHAPES_GRAPH, Dataset(), set())
        assert fetcher.count(missing) == 1

        fetcher.documents[missing] = REMOTE_DOC
        importer.clear()
        ds = Dataset()
        importer.import_document(_importing(missing), SHAPES_GRAPH, ds, set())
        assert fetcher.count(missing) == 2
        assert _has(ds, SHAPES_GRAPH, "RemoteShape", "declaredIn", "remote")
