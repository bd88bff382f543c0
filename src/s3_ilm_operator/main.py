"""Entry point of the S3 ILM Operator.

Run with ``kopf run -m s3_ilm_operator.main``.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Any

import kopf
from werkzeug.serving import make_server

from . import handlers  # noqa: F401
from . import health
from .logging import setup_structured_logging
from .tracing import initialize_tracing

logger = logging.getLogger(__name__)


def start_probe_server(port: int) -> None:
    """Serve health probes and metrics from a daemon thread."""
    server = make_server("0.0.0.0", port, health.create_wsgi_app(), threaded=True)
    threading.Thread(target=server.serve_forever, name="probe-server", daemon=True).start()
    logger.info(f"Serving /healthz, /readyz and /metrics on port {port}")


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure kopf, logging, tracing and the probe server."""
    setup_structured_logging(logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper()))
    initialize_tracing()

    # The status block mirrors the bucket; kopf keeps its own state in annotations
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()
    settings.posting.level = logging.WARNING
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = int(os.getenv("MAX_WORKERS", "4"))

    start_probe_server(int(os.getenv("METRICS_PORT", "8080")))
    health.mark_ready()
