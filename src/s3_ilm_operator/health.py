"""Liveness, readiness and metrics endpoints, served by werkzeug."""

from __future__ import annotations

import json
import threading
from typing import Any

from prometheus_client import make_wsgi_app
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.dispatcher import DispatcherMiddleware
from werkzeug.routing import Map, Rule
from werkzeug.wrappers import Request, Response

# Set once the kopf startup handler has finished
_ready = threading.Event()

_probe_routes = Map([
    Rule("/healthz", endpoint="healthz"),
    Rule("/readyz", endpoint="readyz"),
])


def mark_ready() -> None:
    _ready.set()


def _json(payload: dict[str, Any], status: int = 200) -> Response:
    return Response(json.dumps(payload), status=status, mimetype="application/json")


@Request.application
def _probes(request: Request) -> Any:
    try:
        endpoint, _ = _probe_routes.bind_to_environ(request.environ).match()
    except HTTPException as e:
        return e

    if endpoint == "readyz" and not _ready.is_set():
        return _json({"status": "starting"}, status=503)
    return _json({"status": "ok"})


def create_wsgi_app() -> Any:
    """WSGI app serving /healthz and /readyz, with Prometheus mounted at /metrics."""
    return DispatcherMiddleware(_probes, {"/metrics": make_wsgi_app()})
