"""Knowledge corpus adapters.

A knowledge base is a mapping of file name to file content, where content
holds entries either grouped by category (``{"categories": {name: [...]}}``)
or as a flat list (``{"items": [...]}``). These helpers turn that shape into
``CorpusItem`` objects the index can consume, in a stable order.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
import logging
from pathlib import Path
from typing import Any

import orjson

from docs_knowledge_search.exceptions import CorpusError
from docs_knowledge_search.search.models import CorpusItem


logger = logging.getLogger(__name__)


def iter_corpus_items(knowledge_base: Mapping[str, Any]) -> Iterator[CorpusItem]:
    """Yield every entry of a knowledge base with its file and category.

    Files without ``categories`` or ``items`` are not knowledge files and are
    ignored. Ordinals count entries per (file, category) so generated ids
    stay stable across loads.
    """
    for file_name, file_data in knowledge_base.items():
        if not isinstance(file_data, Mapping):
            logger.debug("Ignoring non-mapping knowledge file %s", file_name)
            continue
        categories = file_data.get("categories")
        items = file_data.get("items")
        if not categories and not items:
            continue

        if isinstance(categories, Mapping):
            for category, entries in categories.items():
                if not isinstance(entries, list):
                    continue
                for ordinal, entry in enumerate(entries):
                    yield CorpusItem(source_file=file_name, category=str(category), entry=entry, ordinal=ordinal)

        if isinstance(items, list):
            for ordinal, entry in enumerate(items):
                yield CorpusItem(source_file=file_name, category=None, entry=entry, ordinal=ordinal)


def load_knowledge_directory(directory: Path) -> dict[str, Any]:
    """Load every ``*.json`` file in ``directory`` keyed by file stem.

    Files are read in sorted order. A file that is not valid JSON raises
    ``CorpusError``; loading a whole corpus is all-or-nothing so a broken file
    never silently shrinks the index.
    """
    if not directory.is_dir():
        raise CorpusError(f"Knowledge directory {directory} does not exist")

    knowledge_base: dict[str, Any] = {}
    for path in sorted(directory.glob("*.json")):
        try:
            knowledge_base[path.stem] = orjson.loads(path.read_bytes())
        except orjson.JSONDecodeError as exc:
            raise CorpusError(f"Knowledge file {path.name} is not valid JSON: {exc}") from exc
    logger.info("Loaded %d knowledge files from %s", len(knowledge_base), directory)
    return knowledge_base
