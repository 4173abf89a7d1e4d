"""Destinations for analytics snapshots.

Publishing is best effort: sinks may raise, and the service logs and
swallows those failures.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
import logging
import os
from pathlib import Path

import orjson

from docs_knowledge_search.domain.search import AnalyticsSummary


logger = logging.getLogger(__name__)


class AbstractAnalyticsSink(ABC):
    """Accepts analytics summary snapshots for external persistence."""

    @abstractmethod
    def publish(self, summary: AnalyticsSummary) -> None:
        raise NotImplementedError


class JsonFileAnalyticsSink(AbstractAnalyticsSink):
    """Write the latest snapshot to a JSON file, replacing it atomically."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def publish(self, summary: AnalyticsSummary) -> None:
        payload = {
            "exported_at": datetime.now(timezone.utc).isoformat(),
            **summary.model_dump(mode="json"),
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
        os.replace(tmp_path, self.path)
        logger.debug("Analytics snapshot written to %s", self.path)
