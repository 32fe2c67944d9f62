from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from shapewalk.config import LOG_LEVEL
from shapewalk.traversal import validate


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Resolve which shape every resource linked from a root resource conforms to.")
    ap.add_argument("shapes", type=Path, help="shapes document (Turtle, N-Triples, N-Quads, RDF/XML or JSON-LD)")
    ap.add_argument("data", type=Path, help="data document")
    ap.add_argument("shape_id", help="IRI of the root shape")
    ap.add_argument("resource_id", help="IRI of the root resource")
    ap.add_argument("--clear-cache", action="store_true", help="drop cached owl:imports first")
    args = ap.parse_args(argv)

    logging.basicConfig(level=LOG_LEVEL)

    results = validate(
        args.shapes.read_text(encoding="utf-8"),
        args.shape_id,
        args.data.read_text(encoding="utf-8"),
        args.resource_id,
        clear_cache=args.clear_cache,
    )

    print("CONFORMS:", args.resource_id in results)
    print(json.dumps(results, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
