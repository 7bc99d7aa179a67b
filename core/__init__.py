# core/__init__.py
"""
core - AWS Finder 엔진

리소스 조회, 식별자 보강, fan-out 집계, 퍼지 검색 엔진을 포함하는 최상위 패키지입니다.

아키텍처:
    core/
    ├── parallel/       # fan-out 집계, 취소 신호, 재시도, boto3 client
    ├── search/         # 평탄화 → 인덱스 → 퍼지 매칭
    ├── data/
    │   └── inventory/  # 리소스 어댑터, CacheResolver, 페이지네이션, 서비스
    ├── config.py       # 중앙 설정 관리
    └── exceptions.py   # 통합 예외 계층

Usage:
    # 설정 사용
    from core.config import get_settings, get_default_region
    region = get_default_region()  # "ap-northeast-2"

    # 예외 처리
    from core.exceptions import ListingError, is_access_denied
    try:
        result = service.fetch_paginated(limit=20, page=1)
    except ListingError as e:
        if e.cause and is_access_denied(e.cause):
            print("권한이 없습니다")

    # 리소스 검색
    from core.data.inventory import create_service
    service = create_service("elasticache", session)
    clusters = service.fuzzy_search("prod")
"""

from core import config, data, exceptions, parallel, search

__all__: list[str] = [
    # 서브패키지
    "data",
    "parallel",
    "search",
    # 모듈
    "config",
    "exceptions",
]
