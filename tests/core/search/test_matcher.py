"""
tests/core/search/test_matcher.py - 퍼지 검색 테스트
"""

from dataclasses import dataclass, field

import pytest

from core.exceptions import SearchConfigError
from core.search import FuzzyMatcher, SearchSchema, build_index, fuzzy_find
from core.search.matcher import looks_specific, max_edits


@dataclass
class Cluster:
    display_name: str
    engine: str = ""
    vpc_name: str = ""
    tags: dict = field(default_factory=dict)


SCHEMA = SearchSchema(
    kind="cluster",
    fields=("display_name", "engine", "vpc_name"),
    boosted=("display_name",),
    extract=lambda c: {"display_name": c.display_name, "engine": c.engine, "vpc_name": c.vpc_name},
    tags=lambda c: c.tags,
)


@pytest.fixture
def clusters():
    return [
        Cluster("prod-cache-cluster", engine="redis"),
        Cluster("dev-redis-cluster", engine="redis"),
        Cluster("test-valkey-cluster", engine="valkey"),
    ]


class TestExampleScenario:
    """클러스터 3개 예시 시나리오"""

    def test_prod_returns_only_first(self, clusters):
        assert fuzzy_find(clusters, "prod", SCHEMA) == [clusters[0]]

    def test_empty_query_returns_all_in_order(self, clusters):
        assert fuzzy_find(clusters, "", SCHEMA) == clusters
        assert fuzzy_find(clusters, "   ", SCHEMA) == clusters

    def test_nonexistent_returns_nothing(self, clusters):
        assert fuzzy_find(clusters, "zzz-nonexistent", SCHEMA) == []


class TestFuzzyMatcher:
    """FuzzyMatcher 테스트"""

    def test_empty_query_hits_every_position(self, clusters):
        hits = FuzzyMatcher().search(build_index(clusters, SCHEMA), "")
        assert [h.position for h in hits] == [0, 1, 2]
        assert all(h.match_type == "all" for h in hits)

    def test_exact_display_name_ranks_first(self):
        """정확한 이름 일치가 여러 부분 일치보다 앞에 옴"""
        resources = [
            Cluster("redis-cache-a"),
            Cluster("my-redis"),
            Cluster("redis"),
            Cluster("redis-b", vpc_name="redis"),
        ]
        hits = FuzzyMatcher().search(build_index(resources, SCHEMA), "Redis")

        assert hits[0].position == 2
        assert hits[0].match_type == "exact"
        assert len(hits) == 4

    def test_specific_query_exact_tier(self):
        """ID/FQDN 형태 질의는 정확 일치 단계에서 끝남"""
        resources = [Cluster("prod-cache"), Cluster("prod-cache-2"), Cluster("my-prod-cache")]
        hits = FuzzyMatcher().search(build_index(resources, SCHEMA), "prod-cache")

        assert [h.position for h in hits] == [0]

    def test_specific_query_contains_tier(self):
        resources = [Cluster("prod-cache-01"), Cluster("dev-cache-01"), Cluster("prod-db")]
        hits = FuzzyMatcher().search(build_index(resources, SCHEMA), "cache-01")

        assert [h.position for h in hits] == [0, 1]
        assert all(h.match_type == "contains" for h in hits)

    def test_boosted_field_outranks_plain_field(self):
        """같은 유형 매칭이면 가중치 필드가 앞섬"""
        resources = [Cluster("alpha", vpc_name="shared"), Cluster("shared")]
        hits = FuzzyMatcher().search(build_index(resources, SCHEMA), "shared")

        assert [h.position for h in hits] == [1, 0]
        assert hits[0].score > hits[1].score

    def test_ties_keep_original_order(self):
        resources = [Cluster("x", engine="redis"), Cluster("y", engine="redis")]
        hits = FuzzyMatcher().search(build_index(resources, SCHEMA), "redis")

        assert [h.position for h in hits] == [0, 1]
        assert hits[0].score == hits[1].score

    def test_typo_tolerated(self):
        """편집 거리 이내 오타 허용"""
        resources = [Cluster("payments-cache"), Cluster("orders-cache")]
        hits = FuzzyMatcher().search(build_index(resources, SCHEMA), "paymnets")

        assert [h.position for h in hits] == [0]
        assert hits[0].match_type == "fuzzy"

    def test_typo_with_separator(self, clusters):
        """구분자가 들어간 질의도 단어별로 오타 허용"""
        assert fuzzy_find(clusters, "prod-cahce", SCHEMA) == [clusters[0]]
        assert fuzzy_find(clusters, "prod cahce", SCHEMA) == [clusters[0]]

    def test_typo_with_separator_ranks_full_match_first(self, clusters):
        hits = FuzzyMatcher().search(build_index(clusters, SCHEMA), "redis-clustr")

        assert hits[0].position == 1
        assert hits[0].match_type == "fuzzy"
        assert all(h.score < hits[0].score for h in hits[1:])

    def test_words_in_any_order(self):
        resources = [Cluster("prod-cache-01"), Cluster("dev-cache-01")]
        hits = FuzzyMatcher().search(build_index(resources, SCHEMA), "cache prod")

        assert hits[0].position == 0
        assert hits[0].match_type == "contains"

    def test_short_words_alone_do_not_match(self):
        """짧은 숫자 토큰만 맞는 IP 형태 질의는 결과 없음"""
        resources = [Cluster("a", vpc_name="10.0.0.0/16"), Cluster("b", vpc_name="10.1.0.0/16")]
        assert fuzzy_find(resources, "10.9.9.9", SCHEMA) == []

    def test_tag_values_searchable(self):
        resources = [Cluster("a", tags={"Team": "Payments"}), Cluster("b", tags={"Team": "Search"})]
        assert fuzzy_find(resources, "payments", SCHEMA) == [resources[0]]

    def test_limit(self, clusters):
        hits = FuzzyMatcher().search(build_index(clusters, SCHEMA), "cluster", limit=2)
        assert len(hits) == 2

    def test_restrict_fields(self, clusters):
        hits = FuzzyMatcher().search(build_index(clusters, SCHEMA), "valkey", fields=["display_name"])
        assert [h.position for h in hits] == [2]

    def test_unknown_field_rejected(self, clusters):
        with pytest.raises(SearchConfigError):
            FuzzyMatcher().search(build_index(clusters, SCHEMA), "x", fields=["endpoint"])

    def test_on_index_callback(self, clusters):
        built = []
        fuzzy_find(clusters, "prod", SCHEMA, on_index=built.append)
        assert len(built) == 1
        assert len(built[0]) == 3


class TestQueryHelpers:
    @pytest.mark.parametrize(
        "query,expected",
        [
            ("prod", False),
            ("10.0.1.5", True),
            ("vpc-0abc", True),
            ("a-very-long-query", True),
            ("averylongqueryxx", True),
            ("short words", False),
        ],
    )
    def test_looks_specific(self, query, expected):
        assert looks_specific(query) is expected

    def test_max_edits(self):
        assert max_edits("ab") == 0
        assert max_edits("abcd") == 1
        assert max_edits("abcdef") == 2
