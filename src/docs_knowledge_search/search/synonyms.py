"""Synonym and abbreviation expansion for search queries.

Two tables live here:

- ``DEFAULT_SYNONYMS`` maps single terms to their domain synonyms. Keys double
  as the set of recognized abbreviations that survive the stopword and
  short-token filters (``mf``, ``nf``, ``dm``...).
- ``TERM_EXPANSIONS`` maps abbreviations to whole phrases. These are appended
  to the raw query text before analysis so multi-word expansions such as
  "studio pro" contribute to phrase matching.

Example:
    - "mf" expands to {"mf", "microflow", "microflows"}
    - "microflow" expands to {"microflow", "mf"}
"""
# ruff: noqa: ERA001  # Comments are intentional documentation, not commented-out code

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence


# Domain synonyms for low-code platform documentation.
# Abbreviations map to their long forms and long forms map back, so lookups
# work in both directions.
DEFAULT_SYNONYMS: dict[str, tuple[str, ...]] = {
    # Abbreviations
    "mf": ("microflow", "microflows"),
    "microflow": ("mf",),
    "nf": ("nanoflow", "nanoflows"),
    "nanoflow": ("nf",),
    "dm": ("domain", "domainmodel"),
    "domainmodel": ("dm", "domain"),
    "np": ("nonpersistent", "non-persistent"),
    "nonpersistent": ("np",),
    "sdk": ("modelsdk", "platformsdk"),
    "modelsdk": ("sdk", "model-sdk"),
    "platformsdk": ("sdk", "platform-sdk"),
    # Common terms
    "entity": ("entities", "object", "objects"),
    "attribute": ("attributes", "field", "fields", "property", "properties"),
    "association": ("associations", "relationship", "relationships", "reference", "references"),
    "page": ("pages", "form", "forms", "screen", "screens"),
    "widget": ("widgets", "component", "components"),
    "module": ("modules",),
    "xpath": ("x-path", "query", "queries"),
    "oql": ("o-q-l",),
    "rest": ("restful", "api", "apis"),
    "commit": ("commits", "save", "persist"),
    "rollback": ("rollbacks", "revert", "undo"),
    "loop": ("loops", "iteration", "iterate", "foreach", "for-each"),
    "error": ("errors", "exception", "exceptions", "bug", "bugs", "issue", "issues"),
    "performance": ("perf", "speed", "optimization", "optimize", "fast", "slow"),
    "security": ("secure", "permission", "permissions", "access", "role", "roles"),
}


# Phrase-level expansions applied to raw query text.
TERM_EXPANSIONS: dict[str, tuple[str, ...]] = {
    "sdk": ("software development kit", "platform sdk", "model sdk", "mendixmodelsdk"),
    "mf": ("microflow", "microflows"),
    "nf": ("nanoflow", "nanoflows"),
    "dm": ("domain model", "domain modeling"),
    "sp": ("studio pro",),
    "api": ("application programming interface", "rest api", "odata"),
    "crud": ("create read update delete", "basic operations"),
    "acl": ("access control list", "security rules", "xpath constraints"),
    "xpath": ("query language", "retrieve expressions"),
    "oql": ("object query language", "reporting queries"),
    "jwt": ("json web token", "authentication token"),
    "sso": ("single sign-on", "authentication"),
    "saml": ("security assertion markup language", "sso authentication"),
    "oidc": ("openid connect", "oauth authentication"),
    "ci": ("continuous integration", "pipeline", "automation"),
    "cd": ("continuous deployment", "deployment pipeline"),
    "mx": ("mendix",),
    "attr": ("attribute", "attributes"),
    "assoc": ("association", "associations", "relationship"),
    "enum": ("enumeration", "enumerations"),
    "np": ("non-persistent", "transient", "non persistent entity"),
    "pe": ("persistent entity", "database entity"),
}


class SynonymExpander:
    """Expands terms to include their synonyms.

    The expander keeps the table's insertion order so expansion output is
    deterministic, which keeps scoring and tests reproducible.
    """

    def __init__(
        self,
        synonyms: Mapping[str, Sequence[str]] | None = None,
        *,
        stem: Callable[[str], str] | None = None,
    ) -> None:
        """Initialize with synonym mappings.

        Args:
            synonyms: Custom synonym mappings. If None, uses DEFAULT_SYNONYMS.
            stem: Optional stemmer applied to every synonym in addition to
                its surface form.
        """
        self._synonyms = dict(synonyms) if synonyms is not None else DEFAULT_SYNONYMS
        self._stem = stem

    def is_abbreviation(self, term: str) -> bool:
        """Return True when the term is a key of the synonym table."""
        return term.lower() in self._synonyms

    def expand(self, term: str) -> list[str]:
        """Expand a single term to include synonyms.

        Args:
            term: The term to expand.

        Returns:
            Ordered, de-duplicated list starting with the term itself.
        """
        normalized = term.lower()
        expanded = [normalized]
        for synonym in self._synonyms.get(normalized, ()):
            expanded.append(synonym)
            if self._stem is not None:
                expanded.append(self._stem(synonym))
        return list(dict.fromkeys(expanded))


def expand_query(query: str, expansions: Mapping[str, Sequence[str]] | None = None) -> str:
    """Append phrase expansions for every abbreviation found in the query.

    "SDK" becomes "sdk software development kit platform sdk model sdk ...".
    Words are de-duplicated while keeping their first position.
    """
    table = expansions if expansions is not None else TERM_EXPANSIONS
    words = query.lower().split()
    expanded = list(words)
    for word in words:
        expanded.extend(table.get(word, ()))
    return " ".join(dict.fromkeys(expanded))
