"""
core/search/flatten.py - 검색용 속성 평탄화

리소스 하나를 "필드명 → 정규화 문자열" 평면 맵으로 변환합니다.
리소스 종류별 차이는 SearchSchema(필드 목록 + 추출 함수)로만 표현하고,
정규화 규칙은 모든 종류에 동일하게 적용합니다.

정규화 규칙:
    - 문자열은 소문자로 변환
    - None(값 없음)은 빈 문자열 (필드는 절대 생략하지 않음)
    - 숫자 카운터는 0이 아닐 때만 10진 문자열, 0이면 빈 문자열
    - bool은 "true"/"false"
    - 리스트는 각 원소를 소문자로 바꾼 뒤 ","로 연결
    - 태그 맵은 두 합성 필드로 분리: tags_kv("key=value" 목록), tag_values(값만)

같은 리소스를 여러 번 평탄화해도 결과는 항상 같습니다. (태그는 키 순으로 정렬)

Example:
    schema = SearchSchema(
        kind="elasticache",
        fields=("id", "display_name", "engine"),
        boosted=("display_name",),
        extract=lambda c: {"id": c.cluster_id, "display_name": c.display_name, "engine": c.engine},
        tags=lambda c: c.tags,
    )
    doc = flatten(cluster, schema)
    doc["tags_kv"]  # "env=prod,team=data"
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Generic, TypeVar

R = TypeVar("R")

# 태그 합성 필드명
TAGS_KV_FIELD = "tags_kv"
TAG_VALUES_FIELD = "tag_values"

LIST_SEPARATOR = ","


@dataclass(frozen=True)
class SearchSchema(Generic[R]):
    """리소스 종류별 검색 필드 선언

    Attributes:
        kind: 리소스 종류 이름 (에러/로그용)
        fields: 인덱싱할 필드명 (추출 함수가 채우는 필드)
        boosted: 가중치를 높일 필드명
        extract: 리소스 → {필드명: 원시 값} 추출 함수
        tags: 리소스 → 태그 맵 추출 함수 (None이면 태그 합성 필드 없음)
    """

    kind: str
    fields: tuple[str, ...]
    boosted: tuple[str, ...]
    extract: Callable[[R], Mapping[str, Any]]
    tags: Callable[[R], Mapping[str, Any]] | None = None

    @property
    def all_fields(self) -> tuple[str, ...]:
        """태그 합성 필드를 포함한 전체 필드명"""
        if self.tags is None:
            return self.fields
        return self.fields + (TAGS_KV_FIELD, TAG_VALUES_FIELD)


def normalize_count(value: int | float | None) -> str:
    """숫자 카운터 정규화 (0/None이면 빈 문자열)"""
    if not value:
        return ""
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return f"{value:.2f}".rstrip("0").rstrip(".")
    return str(value)


def normalize_list(values: Iterable[Any]) -> str:
    """리스트 정규화: 원소별 소문자 변환 후 ","로 연결 (빈 원소 제외)"""
    if isinstance(values, (set, frozenset)):
        items = sorted(normalize_value(v) for v in values)
    else:
        items = [normalize_value(v) for v in values]
    return LIST_SEPARATOR.join(item for item in items if item)


def normalize_value(value: Any) -> str:
    """원시 값 하나를 검색용 문자열로 정규화"""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.lower()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return normalize_count(value)
    if isinstance(value, Enum):
        return normalize_value(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat().lower()
    if isinstance(value, Mapping):
        return flatten_tags(value)[0]
    if isinstance(value, Iterable):
        return normalize_list(value)
    return str(value).lower()


def _iter_tag_pairs(tags: Mapping[str, Any], prefix: str = "") -> Iterable[tuple[str, str]]:
    """(키, 값) 쌍을 키 순으로 생성. 중첩 맵은 "네임스페이스.키"로 펼침"""
    for key in sorted(tags, key=str):
        value = tags[key]
        if key is None or str(key) == "":
            continue
        full_key = f"{prefix}{str(key).lower()}"
        if isinstance(value, Mapping):
            yield from _iter_tag_pairs(value, prefix=f"{full_key}.")
            continue
        text = normalize_value(value)
        if text:
            yield full_key, text


def flatten_tags(tags: Mapping[str, Any] | None) -> tuple[str, str]:
    """태그 맵을 (key=value 목록, 값 목록) 두 문자열로 변환

    값만 담은 필드가 있어야 키 없이 태그 값만 검색해도 매칭됩니다.

    Returns:
        (tags_kv, tag_values). 태그가 없으면 ("", "")
    """
    if not tags:
        return "", ""

    pairs = list(_iter_tag_pairs(tags))
    kv = LIST_SEPARATOR.join(f"{key}={value}" for key, value in pairs)
    values = LIST_SEPARATOR.join(value for _, value in pairs)
    return kv, values


def flatten(resource: R, schema: SearchSchema[R]) -> dict[str, str]:
    """리소스 하나를 평면 필드 맵으로 변환

    스키마에 선언된 모든 필드가 결과에 포함됩니다. (값이 없으면 "")
    추출 함수가 선언되지 않은 키를 돌려주면 무시합니다.

    Args:
        resource: 평탄화할 리소스
        schema: 리소스 종류의 검색 스키마

    Returns:
        필드명 → 정규화 문자열
    """
    raw = schema.extract(resource)
    doc = {name: normalize_value(raw.get(name)) for name in schema.fields}

    if schema.tags is not None:
        kv, values = flatten_tags(schema.tags(resource))
        doc[TAGS_KV_FIELD] = kv
        doc[TAG_VALUES_FIELD] = values

    return doc
