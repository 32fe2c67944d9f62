from __future__ import annotations

import os


def _flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# -----------------------------
# Imports
# -----------------------------
IGNORE_OWL_IMPORTS = _flag("IGNORE_OWL_IMPORTS")

# Prefix for outgoing fetches when direct egress is blocked,
# e.g. "http://proxy.local/fetch?url=" (the target URL is appended encoded)
PROXY = os.getenv("PROXY") or None

MAX_IMPORT_WORKERS = int(os.getenv("MAX_IMPORT_WORKERS", "8"))

# -----------------------------
# HTTP
# -----------------------------
USER_AGENT = os.getenv("USER_AGENT", "shapewalk/0.1 (SHACL conformance resolver)")
REQUEST_TIMEOUT_S = float(os.getenv("REQUEST_TIMEOUT_S", "30"))
RDF_ACCEPT = (
    "text/turtle, application/trig, application/n-triples, "
    "application/n-quads, text/n3, application/ld+json"
)

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
