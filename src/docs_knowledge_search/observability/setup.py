"""Process-level observability wiring driven by ``Settings``."""

from __future__ import annotations

import logging

from docs_knowledge_search.config import Settings
from docs_knowledge_search.observability.logging import configure_logging
from docs_knowledge_search.observability.tracing import SERVICE_NAME, init_tracing


logger = logging.getLogger(__name__)


def configure_observability(
    settings: Settings,
    *,
    enable_tracing: bool = True,
    service_name: str = SERVICE_NAME,
) -> None:
    """Configure logging and, optionally, tracing for a host process.

    Call once at startup. Library code never calls this itself; it only logs
    through module loggers and opens spans on whatever provider is installed.
    """
    configure_logging(level=settings.log_level, json_output=settings.log_json)
    if enable_tracing:
        init_tracing(service_name)
    logger.info(
        "Observability configured",
        extra={"log_level": settings.log_level, "log_json": settings.log_json, "tracing": enable_tracing},
    )
