"""Text and title extraction from semi-structured knowledge entries.

Knowledge entries are arbitrary JSON-like records. Searching them needs two
things: a flat text rendition of every string leaf, and a short title used as
the entry's identity during rank fusion. Titles come from an ordered list of
field probes; the first probe that yields a string wins.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass


MAX_EXTRACTION_DEPTH = 5

# Fields whose content marks an entry's subject; matches here earn a bonus.
IMPORTANT_FIELDS: tuple[str, ...] = ("name", "practice", "feature", "topic", "title", "pattern")


def iter_text_leaves(value: object, depth: int = 0, max_depth: int = MAX_EXTRACTION_DEPTH) -> Iterator[str]:
    """Yield string leaves of a nested structure in field order.

    Recursion stops below ``max_depth`` so cyclic or pathological inputs
    cannot run away.
    """
    if depth > max_depth:
        return
    if isinstance(value, str):
        yield value
    elif isinstance(value, Mapping):
        for child in value.values():
            yield from iter_text_leaves(child, depth + 1, max_depth)
    elif isinstance(value, (list, tuple)):
        for child in value:
            yield from iter_text_leaves(child, depth + 1, max_depth)


def extract_text(entry: object, max_depth: int = MAX_EXTRACTION_DEPTH) -> str:
    """Concatenate every string leaf of ``entry`` with single spaces."""
    return " ".join(iter_text_leaves(entry, max_depth=max_depth))


@dataclass(frozen=True)
class FieldProbe:
    """Reads a string from a (possibly nested) field path."""

    path: tuple[str, ...]

    def __call__(self, entry: Mapping[str, object]) -> str | None:
        current: object = entry
        for key in self.path:
            if not isinstance(current, Mapping):
                return None
            current = current.get(key)
        if isinstance(current, str) and current:
            return current
        return None


@dataclass(frozen=True)
class FirstShortStringProbe:
    """Fallback probe: the first string value of plausible title length."""

    min_length: int = 4
    max_length: int = 99
    max_depth: int = MAX_EXTRACTION_DEPTH

    def __call__(self, entry: Mapping[str, object]) -> str | None:
        for value in entry.values():
            if isinstance(value, str):
                if self.min_length <= len(value) <= self.max_length:
                    return value
                continue
            for leaf in iter_text_leaves(value, depth=1, max_depth=self.max_depth):
                if self.min_length <= len(leaf) <= self.max_length:
                    return leaf
        return None


DEFAULT_TITLE_PROBES: tuple[FieldProbe | FirstShortStringProbe, ...] = (
    *(
        FieldProbe((name,))
        for name in (
            "title",
            "topic",
            "name",
            "practice",
            "pattern_name",
            "problem",
            "feature",
            "scenario",
            "issue",
            "question",
            "rule",
            "technique",
        )
    ),
    FieldProbe(("pattern", "name")),
    FieldProbe(("_metadata", "title")),
    FirstShortStringProbe(),
)


def extract_title(
    entry: object,
    probes: Sequence[FieldProbe | FirstShortStringProbe] = DEFAULT_TITLE_PROBES,
) -> str | None:
    """Return the entry's title using the first probe that succeeds."""
    if isinstance(entry, str):
        return entry if entry else None
    if not isinstance(entry, Mapping):
        return None
    for probe in probes:
        title = probe(entry)
        if title:
            return title
    return None


def important_field_values(entry: object) -> list[str]:
    """Return the string values of title-like fields present on ``entry``."""
    if not isinstance(entry, Mapping):
        return []
    return [value for name in IMPORTANT_FIELDS if isinstance(value := entry.get(name), str) and value]
