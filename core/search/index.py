"""
core/search/index.py - 일회용 검색 인덱스

리소스 목록을 입력 순서 그대로 평탄화해 메모리 인덱스를 만듭니다.
문서의 position은 입력 목록의 인덱스이며, 검색 결과를 원래 리소스로
되돌릴 때 사용합니다.

인덱스는 검색 한 번에만 쓰고 버립니다. 디스크에 저장하거나 요청 간에
재사용하지 않습니다.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from core.exceptions import SearchConfigError

from .flatten import R, SearchSchema, flatten

# 토큰 구분: 영숫자(한글 포함) 연속 구간
_TOKEN_PATTERN = re.compile(r"[^\W_]+")


def tokenize(value: str) -> tuple[str, ...]:
    """정규화된 필드 값을 토큰으로 분리 ("prod-cache-01" → prod, cache, 01)"""
    if not value:
        return ()
    return tuple(_TOKEN_PATTERN.findall(value))


@dataclass(frozen=True)
class IndexDocument:
    """인덱스 문서 하나

    Attributes:
        position: 원본 리소스 목록에서의 인덱스
        fields: 필드명 → 정규화 문자열
        tokens: 필드명 → 토큰 목록 (매칭 시 재계산하지 않도록 미리 분리)
    """

    position: int
    fields: Mapping[str, str]
    tokens: Mapping[str, tuple[str, ...]]


@dataclass(frozen=True)
class SearchIndex:
    """메모리 검색 인덱스

    Attributes:
        kind: 리소스 종류
        documents: 입력 순서대로 정렬된 문서
        fields: 인덱싱된 필드명
        boosted: 가중치 필드명
    """

    kind: str
    documents: tuple[IndexDocument, ...]
    fields: tuple[str, ...]
    boosted: frozenset[str]

    def __len__(self) -> int:
        return len(self.documents)


def build_index(resources: Sequence[R], schema: SearchSchema[R]) -> SearchIndex:
    """리소스 목록으로 검색 인덱스 생성

    값이 비어 있다는 이유로 제외되는 리소스는 없습니다.

    Args:
        resources: 인덱싱할 리소스 (순서가 position이 됨)
        schema: 검색 스키마

    Returns:
        SearchIndex

    Raises:
        SearchConfigError: 필드 목록이 비었거나, 가중치 필드가 선언되지 않았거나,
            문서가 필드를 하나도 만들지 못한 경우
    """
    fields = schema.all_fields
    if not fields:
        raise SearchConfigError(schema.kind, "인덱싱할 필드가 없습니다")

    unknown = [name for name in schema.boosted if name not in fields]
    if unknown:
        raise SearchConfigError(schema.kind, f"선언되지 않은 가중치 필드: {', '.join(unknown)}")

    documents = []
    for position, resource in enumerate(resources):
        doc_fields = flatten(resource, schema)
        if not doc_fields:
            raise SearchConfigError(schema.kind, f"문서 {position}에서 필드를 만들지 못했습니다")
        documents.append(
            IndexDocument(
                position=position,
                fields=doc_fields,
                tokens={name: tokenize(value) for name, value in doc_fields.items()},
            )
        )

    return SearchIndex(
        kind=schema.kind,
        documents=tuple(documents),
        fields=fields,
        boosted=frozenset(schema.boosted),
    )
