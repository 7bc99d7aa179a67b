"""
core/search/matcher.py - 가중치 퍼지 검색

일회용 SearchIndex에 질의를 실행하고 (position, score) 목록을 돌려줍니다.

매칭 단계:
    1. 빈 질의: 모든 문서를 원래 순서로 반환 (필터 없음 = 전체 목록)
    2. 구체적 질의 (15자 이상, 또는 . : - _ / [ ] @ 포함 - ID, FQDN, IP 등):
       필드 값 정확 일치 → 부분 문자열 일치 순으로 먼저 시도하고,
       결과가 있으면 그 단계에서 종료
    3. 일반 질의: 필드별 점수 중 최고점 사용
        - 값 정확 일치 (1.0)
        - 토큰 정확 일치 (0.9)
        - 접두사 (0.8)
        - 부분 문자열 (0.6)
        - Fuzzy 토큰 (0.4~0.55, rapidfuzz Levenshtein 편집 거리 이내)
        - 단어별 매칭: 질의를 토큰으로 나눠 단어마다 포함 또는 fuzzy 비교.
          모든 단어가 맞으면 부분 문자열(0.6) 또는 fuzzy 점수,
          일부만 맞으면 0.3 × 매칭 비율
       가중치 필드는 1.8배. 여러 필드가 매칭되면 0.01 미만의 가산점.

정렬은 점수 내림차순, 동점이면 원래 순서입니다.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from rapidfuzz.distance import Levenshtein

from core.exceptions import SearchConfigError

from .flatten import R, SearchSchema
from .index import IndexDocument, SearchIndex, build_index, tokenize

logger = logging.getLogger(__name__)

# 매칭 점수
SCORE_EXACT = 1.0
SCORE_TOKEN = 0.9
SCORE_PREFIX = 0.8
SCORE_CONTAINS = 0.6
FUZZY_SCORE_BASE = 0.4
FUZZY_SCORE_MAX = 0.55
PARTIAL_SCORE = 0.3

BOOST_WEIGHT = 1.8
COVERAGE_WEIGHT = 0.009  # 필드 간 동점 처리용, 매칭 단계 차이보다 항상 작음

FUZZY_MIN_LENGTH = 3  # 짧은 질의는 fuzzy 효과가 낮음
SPECIFIC_MIN_LENGTH = 15
SPECIFIC_CHARS = frozenset(".:-_/[]@")


@dataclass(frozen=True)
class SearchHit:
    """검색 결과 항목

    Attributes:
        position: 원본 리소스 목록 인덱스
        score: 관련도 점수
        match_type: exact, token, prefix, contains, fuzzy, partial, all
        field: 최고점을 낸 필드명
    """

    position: int
    score: float
    match_type: str = ""
    field: str = ""


def normalize_query(query: str | None) -> str:
    """질의 정규화 (평탄화 규칙과 동일하게 소문자, 공백 정리)"""
    if not query:
        return ""
    return " ".join(query.lower().split())


def looks_specific(query: str) -> bool:
    """ID/FQDN/IP처럼 구체적인 질의인지 판단"""
    if len(query) >= SPECIFIC_MIN_LENGTH:
        return True
    return any(char in SPECIFIC_CHARS for char in query)


def max_edits(query: str) -> int:
    """질의 길이에 따른 fuzzy 허용 편집 거리"""
    if len(query) < FUZZY_MIN_LENGTH:
        return 0
    if len(query) <= 4:
        return 1
    return 2


class FuzzyMatcher:
    """가중치 퍼지 검색기

    Example:
        index = build_index(clusters, CACHE_CLUSTER_SCHEMA)
        hits = FuzzyMatcher().search(index, "prod")
        matched = [clusters[h.position] for h in hits]
    """

    def __init__(self, boost_weight: float = BOOST_WEIGHT):
        self.boost_weight = boost_weight

    def search(
        self,
        index: SearchIndex,
        query: str | None,
        fields: Sequence[str] | None = None,
        boosted: Iterable[str] | None = None,
        limit: int | None = None,
    ) -> list[SearchHit]:
        """질의 실행

        Args:
            index: 검색 인덱스
            query: 검색어 (빈 값이면 전체 반환)
            fields: 검색할 필드 (None이면 인덱스 전체 필드)
            boosted: 가중치 필드 (None이면 인덱스 선언값)
            limit: 최대 결과 수 (빈 질의에는 적용하지 않음)

        Returns:
            점수 내림차순 SearchHit 목록. 일치 항목이 없으면 빈 목록

        Raises:
            SearchConfigError: 인덱스에 없는 필드를 지정한 경우
        """
        q = normalize_query(query)
        if not q:
            return [SearchHit(doc.position, 0.0, "all") for doc in index.documents]

        search_fields = tuple(fields) if fields else index.fields
        if not search_fields:
            raise SearchConfigError(index.kind, "검색할 필드가 없습니다")
        unknown = [name for name in search_fields if name not in index.fields]
        if unknown:
            raise SearchConfigError(index.kind, f"인덱싱되지 않은 필드: {', '.join(unknown)}")

        boost_set = frozenset(boosted) if boosted is not None else index.boosted

        hits: list[SearchHit] = []
        if looks_specific(q):
            hits = self._tier(index, search_fields, boost_set, q, "exact")
            if not hits:
                hits = self._tier(index, search_fields, boost_set, q, "contains")

        if not hits:
            words = list(tokenize(q))
            for doc in index.documents:
                hit = self._score_document(doc, search_fields, boost_set, q, words)
                if hit is not None:
                    hits.append(hit)

        hits.sort(key=lambda h: (-h.score, h.position))
        if limit is not None and limit > 0:
            hits = hits[:limit]

        logger.debug(f"검색 완료 [{index.kind}] '{q}': {len(hits)}/{len(index)}건")
        return hits

    def _weight(self, field: str, boosted: frozenset[str]) -> float:
        return self.boost_weight if field in boosted else 1.0

    def _tier(
        self,
        index: SearchIndex,
        fields: Sequence[str],
        boosted: frozenset[str],
        query: str,
        mode: str,
    ) -> list[SearchHit]:
        """구체적 질의용 단계 매칭 (exact 또는 contains)"""
        base = SCORE_EXACT if mode == "exact" else SCORE_CONTAINS
        hits = []
        for doc in index.documents:
            best_score = 0.0
            best_field = ""
            for name in fields:
                value = doc.fields.get(name, "")
                if not value:
                    continue
                matched = value == query if mode == "exact" else query in value
                if matched:
                    score = base * self._weight(name, boosted)
                    if score > best_score:
                        best_score, best_field = score, name
            if best_score > 0:
                hits.append(SearchHit(doc.position, best_score, mode, best_field))
        return hits

    def _score_document(
        self,
        doc: IndexDocument,
        fields: Sequence[str],
        boosted: frozenset[str],
        query: str,
        words: list[str],
    ) -> SearchHit | None:
        best_score = 0.0
        best_type = ""
        best_field = ""
        matched_fields = 0

        for name in fields:
            score, match_type = self._score_field(
                query, words, doc.fields.get(name, ""), doc.tokens.get(name, ())
            )
            if score <= 0:
                continue
            matched_fields += 1
            weighted = score * self._weight(name, boosted)
            if weighted > best_score:
                best_score, best_type, best_field = weighted, match_type, name

        if best_score <= 0:
            return None

        coverage = COVERAGE_WEIGHT * matched_fields / len(fields)
        return SearchHit(doc.position, best_score + coverage, best_type, best_field)

    def _score_field(
        self,
        query: str,
        words: list[str],
        value: str,
        tokens: tuple[str, ...],
    ) -> tuple[float, str]:
        """필드 하나의 매칭 점수 (점수, 매칭 유형)"""
        if not value:
            return 0.0, ""

        if value == query:
            return SCORE_EXACT, "exact"

        if query in tokens:
            return SCORE_TOKEN, "token"

        if value.startswith(query) or any(token.startswith(query) for token in tokens):
            return SCORE_PREFIX, "prefix"

        if query in value:
            return SCORE_CONTAINS, "contains"

        similarity = self._similarity(query, (*tokens, value))
        if similarity > 0:
            return _fuzzy_score(similarity), "fuzzy"

        if words and words != [query]:
            return self._score_words(words, value, tokens)

        return 0.0, ""

    def _score_words(self, words: list[str], value: str, tokens: tuple[str, ...]) -> tuple[float, str]:
        """구분자로 나뉜 질의의 단어별 매칭 점수

        짧은 단어(FUZZY_MIN_LENGTH 미만)는 토큰 정확 일치만 인정하며,
        짧은 단어만 맞은 경우는 매칭으로 보지 않습니다.
        """
        similarities = []
        for word in words:
            if len(word) < FUZZY_MIN_LENGTH:
                similarities.append(1.0 if word in tokens else 0.0)
            elif word in value:
                similarities.append(1.0)
            else:
                similarities.append(self._similarity(word, tokens))

        if not any(sim > 0 for word, sim in zip(words, similarities) if len(word) >= FUZZY_MIN_LENGTH):
            return 0.0, ""

        matched = [sim for sim in similarities if sim > 0]
        if len(matched) < len(words):
            return PARTIAL_SCORE * len(matched) / len(words), "partial"
        if all(sim == 1.0 for sim in matched):
            return SCORE_CONTAINS, "contains"
        return _fuzzy_score(sum(matched) / len(matched)), "fuzzy"

    def _similarity(self, query: str, candidates: Iterable[str]) -> float:
        """편집 거리 허용 범위 안에서 가장 가까운 후보와의 유사도 (없으면 0)"""
        budget = max_edits(query)
        if budget == 0:
            return 0.0

        best = 0.0
        for candidate in candidates:
            if abs(len(candidate) - len(query)) > budget:
                continue
            distance = Levenshtein.distance(query, candidate, score_cutoff=budget)
            if distance > budget:
                continue
            best = max(best, 1.0 - distance / max(len(query), len(candidate)))
        return best


def _fuzzy_score(similarity: float) -> float:
    """유사도를 FUZZY_SCORE_BASE~FUZZY_SCORE_MAX 구간 점수로 변환"""
    return FUZZY_SCORE_BASE + (FUZZY_SCORE_MAX - FUZZY_SCORE_BASE) * similarity


def fuzzy_find(
    resources: Sequence[R],
    query: str | None,
    schema: SearchSchema[R],
    matcher: FuzzyMatcher | None = None,
    on_index: Callable[[SearchIndex], None] | None = None,
) -> list[R]:
    """리소스 목록을 질의로 걸러 관련도 순으로 반환

    빈 질의는 인덱스를 만들지 않고 입력 목록을 그대로 반환합니다.

    Args:
        resources: 검색 대상 리소스
        query: 검색어
        schema: 리소스 종류의 검색 스키마
        matcher: 검색기 (None이면 기본 설정)
        on_index: 인덱스 생성 직후 호출할 콜백 (로깅/테스트용)

    Returns:
        매칭된 리소스 목록
    """
    if not normalize_query(query):
        return list(resources)

    index = build_index(resources, schema)
    if on_index is not None:
        on_index(index)

    hits = (matcher or FuzzyMatcher()).search(index, query)
    return [resources[hit.position] for hit in hits if 0 <= hit.position < len(resources)]
