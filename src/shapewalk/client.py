from __future__ import annotations

from dataclasses import dataclass, field

import requests

from .config import REQUEST_TIMEOUT_S, USER_AGENT
from .errors import ValidatorClientError


@dataclass
class ValidatorClient:
    """Talks to a running shapewalk service (see shapewalk.app)."""

    endpoint: str
    timeout: float = REQUEST_TIMEOUT_S
    session: requests.Session = field(default_factory=requests.Session)

    def __post_init__(self) -> None:
        self.endpoint = self.endpoint.rstrip("/")
        self.session.headers.update({"User-Agent": USER_AGENT})

    def validate(
        self,
        shapes_graph: str,
        shape_id: str,
        data_graph: str,
        data_id: str,
        clear_cache: bool = False,
    ) -> dict[str, str]:
        form = {
            "shapesGraph": shapes_graph,
            "shapeID": shape_id,
            "dataGraph": data_graph,
            "dataID": data_id,
        }
        if clear_cache:
            form["clearCache"] = "true"

        r = self.session.post(self.endpoint + "/", data=form, timeout=self.timeout)
        if not r.ok:
            raise ValidatorClientError(r.status_code, (r.text or "")[:800])
        return r.json()

    def healthy(self) -> bool:
        try:
            r = self.session.get(self.endpoint + "/healthz", timeout=self.timeout)
        except requests.RequestException:
            return False
        return r.ok and r.text.strip() == "ok"
