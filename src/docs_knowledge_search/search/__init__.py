"""
Keyword retrieval, fusion and analytics core.

This package provides the pure-Python half of hybrid search:
- analyzers: Tokenizer, stopword/stem filters and query term groups
- synonyms: Domain abbreviation and phrase expansion tables
- extraction: Text and title probing over nested knowledge entries
- index: Immutable in-memory inverted index
- fuzzy: Levenshtein-based typo tolerance
- keyword_ranker: Coverage/IDF/proximity keyword scoring
- fusion, freshness: Reciprocal Rank Fusion with freshness boosting and dedup
- analytics: Query analytics and knowledge-gap tracking
"""
