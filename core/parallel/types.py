"""
core/parallel/types.py - 병렬 실행 공통 타입
"""

from __future__ import annotations

from enum import Enum


class ErrorCategory(Enum):
    """AWS API 에러 분류

    재시도 여부 판단과 로그 레벨 결정에 사용합니다.
    """

    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    THROTTLING = "throttling"
    TIMEOUT = "timeout"
    EXPIRED_TOKEN = "expired_token"
    NETWORK = "network"
    INVALID_REQUEST = "invalid_request"
    SERVICE_ERROR = "service_error"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"
