from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from rdflib import Dataset, URIRef

from .config import IGNORE_OWL_IMPORTS, MAX_IMPORT_WORKERS
from .fetch import FETCH_CACHE, PREFIXES, FetchCache, HttpFetcher, PrefixMap
from .formats import ParsedDocument, parse_rdf
from .iri import to_url
from .namespaces import OWL

logger = logging.getLogger(__name__)


@dataclass
class ImportSession:
    """State shared by every import performed for one validation request."""

    dataset: Dataset
    seen_urls: set[str] = field(default_factory=set)
    lock: threading.Lock = field(default_factory=threading.Lock)


class RDFImporter:
    """
    Loads RDF documents into a dataset and follows their owl:imports.

    Parsed imports are memoized in a FetchCache (process-wide by default), so
    a shape document edited and re-validated only costs the fetches of what
    actually changed. Imports of one document are loaded concurrently; a
    failing import is logged and skipped while its siblings carry on.
    """

    def __init__(
        self,
        fetcher: Optional[Callable[[str], str]] = None,
        cache: Optional[FetchCache] = None,
        prefixes: Optional[PrefixMap] = None,
        follow_imports: bool = not IGNORE_OWL_IMPORTS,
        max_workers: int = MAX_IMPORT_WORKERS,
    ) -> None:
        self.fetcher = fetcher if fetcher is not None else HttpFetcher()
        self.cache = cache if cache is not None else FETCH_CACHE
        self.prefixes = prefixes if prefixes is not None else PREFIXES
        self.follow_imports = follow_imports
        self.max_workers = max(1, max_workers)

    def clear(self) -> None:
        """Forget every cached import and every recorded prefix."""
        self.cache.clear()
        self.prefixes.clear()
        logger.info("cleared fetch cache and prefixes")

    def import_document(
        self,
        text: str,
        target_graph: URIRef,
        dataset: Dataset,
        seen_urls: Optional[set[str]] = None,
    ) -> None:
        """
        Parse `text` into `target_graph` of `dataset`, then follow its imports.

        Parse errors of this document propagate (RDFParseError); errors of the
        documents it imports do not. `seen_urls` is shared by all documents
        of one request so each URL is merged at most once.
        """
        session = ImportSession(dataset, seen_urls if seen_urls is not None else set())
        parsed = parse_rdf(text)
        self.prefixes.update(parsed.prefixes)
        self._merge(parsed, target_graph, session)

    # -----------------------------
    # internals
    # -----------------------------
    def _load(self, url: str) -> ParsedDocument:
        text = self.fetcher(url)
        parsed = parse_rdf(text, base=url)
        self.prefixes.update(parsed.prefixes)
        logger.debug("parsed %s: %d triples", url, len(parsed))
        return parsed

    def _import_url(self, url: str, target_graph: URIRef, session: ImportSession) -> None:
        logger.debug("loading owl:imports %s", url)
        parsed = self.cache.get(url, self._load)
        self._merge(parsed, target_graph, session)

    def _merge(self, parsed: ParsedDocument, target_graph: URIRef, session: ImportSession) -> None:
        graph = session.dataset.graph(target_graph)
        pending: list[str] = []
        prefixes: Optional[dict[str, str]] = None

        with session.lock:
            for s, p, o in parsed.triples:
                graph.add((s, p, o))

                if p != OWL.imports or not self.follow_imports:
                    continue
                if prefixes is None:
                    prefixes = self.prefixes.snapshot()
                url = to_url(str(o), prefixes)
                # import url only once per request
                if url and url not in session.seen_urls:
                    session.seen_urls.add(url)
                    pending.append(url)

        if pending:
            self._import_all(pending, target_graph, session)

    def _import_all(self, urls: Iterable[str], target_graph: URIRef, session: ImportSession) -> None:
        urls = list(urls)
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(urls))) as pool:
            futures = {pool.submit(self._import_url, url, target_graph, session): url for url in urls}
            for fut in as_completed(futures):
                err = fut.exception()
                if err is not None:
                    logger.warning("failed loading owl:imports %s: %s", futures[fut], err)
