"""Analyzer utilities for the knowledge search stack.

This module keeps Whoosh's composable tokenizer/filter design without pulling
in heavy dependencies. One ``KnowledgeAnalyzer`` instance serves both index
building and query parsing so the two sides always agree on what a term is.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, MutableMapping, Sequence
from dataclasses import dataclass, field
import re
from typing import Any, Literal, Protocol

from docs_knowledge_search.search.synonyms import SynonymExpander


@dataclass
class Token:
    """Represents a token emitted by analyzers."""

    text: str
    position: int
    start_char: int
    end_char: int
    attributes: MutableMapping[str, Any] = field(default_factory=dict)

    def copy_with(self, **updates: Any) -> Token:
        data = {
            "text": self.text,
            "position": self.position,
            "start_char": self.start_char,
            "end_char": self.end_char,
            "attributes": dict(self.attributes),
        }
        data.update(updates)
        return Token(**data)


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class RegexTokenizer:
    """Regex-based tokenizer that yields word tokens.

    The default pattern keeps hyphens inside words ("non-persistent") and
    treats every other non-word character as a separator.
    """

    def __init__(self, pattern: str = r"[\w-]+", flags: int = re.UNICODE | re.MULTILINE) -> None:
        self.pattern = re.compile(pattern, flags)

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(self.pattern.finditer(text)):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )


class LowercaseFilter:
    """Filter that lowercases token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text.islower():
                yield token
            else:
                yield token.copy_with(text=token.text.lower())


DEFAULT_STOPWORDS = [
    "a",
    "an",
    "and",
    "are",
    "as",
    "at",
    "be",
    "by",
    "for",
    "from",
    "has",
    "he",
    "in",
    "is",
    "it",
    "its",
    "of",
    "on",
    "that",
    "the",
    "to",
    "was",
    "will",
    "with",
]

# Ordered suffix rules, first match wins.
STEM_RULES: tuple[tuple[str, str], ...] = (
    ("ies", "y"),  # entities -> entity
    ("es", ""),
    ("s", ""),  # microflows -> microflow
    ("ing", ""),
    ("ed", ""),
    ("tion", "t"),  # creation -> creat
    ("ation", ""),
)

MIN_TERM_LENGTH = 3
MIN_STEM_LENGTH = 4


def stem(word: str) -> str:
    """Strip the first matching suffix rule from a lowercase word.

    Words shorter than four characters are returned unchanged, and a rule
    only applies when more than two characters remain afterwards.
    """
    if len(word) < MIN_STEM_LENGTH:
        return word
    for suffix, replacement in STEM_RULES:
        if word.endswith(suffix) and len(word) > len(suffix) + 2:
            return word[: -len(suffix)] + replacement
    return word


class StopFilter:
    """Removes stopwords and short tokens, keeping recognized abbreviations."""

    def __init__(
        self,
        stopwords: Sequence[str] | None = None,
        *,
        min_length: int = MIN_TERM_LENGTH,
        keep: Callable[[str], bool] | None = None,
    ) -> None:
        vocab = stopwords if stopwords is not None else DEFAULT_STOPWORDS
        self.stopwords = {word.lower() for word in vocab}
        self.min_length = min_length
        self._keep = keep

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            text = token.text
            if self._keep is not None and self._keep(text):
                yield token
                continue
            if len(text) < self.min_length or text in self.stopwords:
                continue
            yield token


class SuffixStemFilter:
    """Applies ``stem`` to every token.

    With ``keep_original`` the unstemmed token is emitted too, sharing the
    position of its stem. Index building uses that so both surface and root
    forms are searchable.
    """

    def __init__(self, *, keep_original: bool = False) -> None:
        self.keep_original = keep_original

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            stemmed = stem(token.text)
            if self.keep_original and stemmed != token.text:
                yield token
            yield token if stemmed == token.text else token.copy_with(text=stemmed)


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters).

    Positions are renumbered after the filters listed here run, so removed
    stopwords do not leave gaps.
    """

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        tokens = list(stream)
        for idx, token in enumerate(tokens):  # normalize positions post-filtering
            token.position = idx
        return tokens


@dataclass(frozen=True)
class QueryTerms:
    """Normalized query terms grouped by the base term that produced them.

    ``groups`` pairs each base (stemmed) query term with its variants: the
    term itself, its synonyms, and any fuzzy matches added later. Coverage
    scoring counts a base term as matched when any of its variants matched.
    """

    groups: tuple[tuple[str, tuple[str, ...]], ...]

    @classmethod
    def empty(cls) -> QueryTerms:
        return cls(())

    def is_empty(self) -> bool:
        return not self.groups

    @property
    def base_terms(self) -> tuple[str, ...]:
        return tuple(base for base, _variants in self.groups)

    @property
    def terms(self) -> tuple[str, ...]:
        """All distinct variants in first-seen order."""
        ordered: dict[str, None] = {}
        for _base, variants in self.groups:
            for variant in variants:
                ordered.setdefault(variant, None)
        return tuple(ordered)

    def with_variants(self, extra: dict[str, Sequence[str]]) -> QueryTerms:
        """Return a copy with additional variants appended per base term."""
        groups = []
        for base, variants in self.groups:
            merged = dict.fromkeys(variants)
            for variant in extra.get(base, ()):
                merged.setdefault(variant, None)
            groups.append((base, tuple(merged)))
        return QueryTerms(tuple(groups))


class KnowledgeAnalyzer:
    """Normalizer shared by index building and query parsing.

    Pipeline: lowercase, split on anything that is not a word character or
    hyphen, drop stopwords and tokens under three characters (recognized
    abbreviations survive), then stem.
    """

    def __init__(
        self,
        *,
        stopwords: Sequence[str] | None = None,
        expander: SynonymExpander | None = None,
    ) -> None:
        self.expander = expander or SynonymExpander(stem=stem)
        filters: list[TokenFilter] = [
            LowercaseFilter(),
            StopFilter(stopwords, keep=self.expander.is_abbreviation),
        ]
        self.pipeline = AnalyzerPipeline(RegexTokenizer(), filters)
        self._index_stemmer = SuffixStemFilter(keep_original=True)
        self._query_stemmer = SuffixStemFilter()

    def index_tokens(self, text: str) -> list[Token]:
        """Tokens for index building: raw and stemmed forms per position."""
        if not text:
            return []
        return list(self._index_stemmer(self.pipeline(text)))

    def query_terms(self, text: str) -> QueryTerms:
        """Stemmed, synonym-expanded query terms grouped by base term."""
        if not text or not text.strip():
            return QueryTerms.empty()
        groups: dict[str, tuple[str, ...]] = {}
        for token in self._query_stemmer(self.pipeline(text)):
            if token.text in groups:
                continue
            groups[token.text] = tuple(self.expander.expand(token.text))
        return QueryTerms(tuple(groups.items()))

    def normalize(self, text: str, mode: Literal["index", "query"] = "index") -> list[str]:
        """Return the distinct normalized terms of ``text`` in first-seen order."""
        if mode == "query":
            return list(self.query_terms(text).terms)
        return list(dict.fromkeys(token.text for token in self.index_tokens(text)))


_analyzer_holder: dict[str, KnowledgeAnalyzer | None] = {"analyzer": None}


def get_analyzer() -> KnowledgeAnalyzer:
    """Return the shared default analyzer."""
    if _analyzer_holder["analyzer"] is None:
        _analyzer_holder["analyzer"] = KnowledgeAnalyzer()
    return _analyzer_holder["analyzer"]  # type: ignore[return-value]
