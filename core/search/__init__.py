"""
core/search - 리소스 퍼지 검색 엔진

리소스 종류와 무관한 평탄화 → 인덱스 → 검색 엔진입니다.
리소스 종류별로는 SearchSchema만 선언합니다.

Example:
    from core.search import FuzzyMatcher, build_index

    index = build_index(clusters, CACHE_CLUSTER_SCHEMA)
    hits = FuzzyMatcher().search(index, "prod")
"""

from .flatten import (
    TAG_VALUES_FIELD,
    TAGS_KV_FIELD,
    SearchSchema,
    flatten,
    flatten_tags,
    normalize_value,
)
from .index import IndexDocument, SearchIndex, build_index, tokenize
from .matcher import FuzzyMatcher, SearchHit, fuzzy_find, normalize_query

__all__: list[str] = [
    # Flatten
    "SearchSchema",
    "flatten",
    "flatten_tags",
    "normalize_value",
    "TAGS_KV_FIELD",
    "TAG_VALUES_FIELD",
    # Index
    "SearchIndex",
    "IndexDocument",
    "build_index",
    "tokenize",
    # Matcher
    "FuzzyMatcher",
    "SearchHit",
    "fuzzy_find",
    "normalize_query",
]
