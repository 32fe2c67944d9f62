from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar
from urllib.parse import quote

import requests

from .config import PROXY, RDF_ACCEPT, REQUEST_TIMEOUT_S, USER_AGENT
from .errors import FetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class HttpFetcher:
    """Retrieves RDF documents over HTTP, optionally through a proxy prefix."""

    proxy: Optional[str] = PROXY
    timeout: float = REQUEST_TIMEOUT_S
    accept: str = RDF_ACCEPT
    session: requests.Session = field(default_factory=requests.Session)

    def __post_init__(self) -> None:
        self.session.headers.update({"User-Agent": USER_AGENT})

    def proxied(self, url: str) -> str:
        if not self.proxy:
            return url
        return self.proxy + quote(url, safe="")

    def __call__(self, url: str) -> str:
        target = self.proxied(url)
        try:
            r = self.session.get(target, headers={"Accept": self.accept}, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(url, str(e)) from e

        if not r.ok:
            snippet = (r.text or "")[:300]
            raise FetchError(url, f"status {r.status_code}: {snippet}")
        return r.text


class PrefixMap:
    """
    Process-wide prefix declarations seen while parsing, used to expand
    prefixed owl:imports objects. The last declaration of a prefix wins.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._prefixes: dict[str, str] = {}

    def record(self, prefix: str, iri: str) -> None:
        if not prefix:
            return
        with self._lock:
            self._prefixes[prefix] = iri

    def update(self, pairs) -> None:
        for prefix, iri in pairs:
            self.record(prefix, iri)

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._prefixes)

    def get(self, prefix: str) -> Optional[str]:
        with self._lock:
            return self._prefixes.get(prefix)

    def clear(self) -> None:
        with self._lock:
            self._prefixes.clear()

    def __len__(self) -> int:
        return len(self._prefixes)


class FetchCache:
    """
    url -> Future of the loaded document.

    The future is installed before loading starts, so concurrent callers for
    the same URL wait on one load instead of fetching again. Failed loads stay
    cached until clear() like successful ones.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, Future] = {}

    def get(self, url: str, load: Callable[[str], T]) -> T:
        with self._lock:
            fut = self._entries.get(url)
            owner = fut is None
            if owner:
                fut = Future()
                self._entries[url] = fut

        if owner:
            try:
                fut.set_result(load(url))
            except BaseException as e:
                # waiters must never hang on a load that died
                fut.set_exception(e)
                raise
        else:
            logger.debug("cache hit for %s", url)

        return fut.result()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# Shared by every request in this process until cleared
FETCH_CACHE = FetchCache()
PREFIXES = PrefixMap()
