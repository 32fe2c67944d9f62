from __future__ import annotations

import json
import logging
from typing import Any, Optional

from flask import Flask, Response, request

from .config import HOST, LOG_LEVEL, PORT
from .errors import MissingParameterError
from .importer import RDFImporter
from .oracle import ConformanceOracle, PyShaclOracle
from .traversal import validate

logger = logging.getLogger(__name__)

REQUIRED_PARAMS = ("shapesGraph", "shapeID", "dataGraph", "dataID")
# the root resource may also be sent as resourceID
PARAM_ALIASES = {"dataID": ("dataID", "resourceID")}


# -----------------------------
# Helpers: form handling
# -----------------------------
def single_form_param(name: str) -> str:
    """The one non-empty value sent for `name` (or one of its aliases)."""
    for key in PARAM_ALIASES.get(name, (name,)):
        values = request.form.getlist(key)
        if len(values) == 1 and values[0]:
            return values[0]
    raise MissingParameterError(name)


def wants_clear_cache() -> bool:
    value = (request.form.get("clearCache") or "").strip().lower()
    return bool(value) and value not in ("0", "false", "no", "off")


def json_response(body: Any, status: int = 200) -> Response:
    return Response(json.dumps(body), status=status, content_type="application/json")


# -----------------------------
# App
# -----------------------------
def create_app(
    importer: Optional[RDFImporter] = None,
    oracle: Optional[ConformanceOracle] = None,
) -> Flask:
    app = Flask(__name__)
    app.config["IMPORTER"] = importer or RDFImporter()
    app.config["ORACLE"] = oracle or PyShaclOracle()

    @app.get("/healthz")
    def healthz() -> Response:
        return Response("ok", content_type="text/plain; charset=utf-8")

    @app.post("/")
    def conformance() -> Response:
        try:
            params = {name: single_form_param(name) for name in REQUIRED_PARAMS}
        except MissingParameterError as e:
            return json_response({"error": str(e)}, status=400)

        try:
            results = validate(
                params["shapesGraph"],
                params["shapeID"],
                params["dataGraph"],
                params["dataID"],
                clear_cache=wants_clear_cache(),
                importer=app.config["IMPORTER"],
                oracle=app.config["ORACLE"],
            )
        except Exception as e:
            logger.exception("error validating %s against %s", params["dataID"], params["shapeID"])
            return json_response({"error": {"type": type(e).__name__, "message": str(e)}}, status=500)

        logger.info("validation results against %s: %s", params["shapeID"], results)
        return json_response(results)

    return app


app = create_app()


def main() -> None:
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(host=HOST, port=PORT)


if __name__ == "__main__":
    main()
