"""
core/exceptions.py - 통합 예외 계층 구조

리소스 조회/보강/검색 전 과정에서 사용하는 예외 클래스들을 정의합니다.
예외 종류에 따라 처리 정책이 다릅니다.

예외 계층 구조:
    AFError (베이스)
    ├── ConfigError (설정 관련)
    ├── ValidationError (입력 검증)
    ├── APICallError (AWS API 호출 실패)
    ├── ListingError (전체 목록 조회 실패 - 요청 중단)
    ├── ResolveError (식별자 → 객체 조회 실패 - 보강 단계에서 복구)
    ├── AggregationError (fan-out 집계 실패 - 부분 결과 없음)
    ├── OperationCancelledError (취소 신호)
    └── SearchConfigError (검색 인덱스 설정 오류)

Usage:
    from core.exceptions import APICallError, ListingError

    try:
        page = elasticache.describe_cache_clusters()
    except ClientError as e:
        raise ListingError(
            kind="elasticache",
            scope="default/ap-northeast-2",
            cause=APICallError.from_client_error("elasticache", "describe_cache_clusters", e),
        ) from e
"""

from typing import Any, Dict, Optional

# =============================================================================
# 베이스 예외
# =============================================================================


class AFError(Exception):
    """AWS Finder 기본 예외 클래스

    모든 커스텀 예외의 베이스 클래스입니다.

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


# =============================================================================
# 설정 / 입력 관련 예외
# =============================================================================


class ConfigError(AFError):
    """설정 관련 예외"""

    def __init__(
        self,
        key: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        full_message = f"설정 오류 [{key}]: {message}"
        super().__init__(full_message, cause)
        self.config_key = key
        self.details["config_key"] = key


class ValidationError(AFError):
    """입력 검증 오류"""

    def __init__(
        self,
        field: str,
        value: Any,
        expected: str,
        cause: Optional[Exception] = None,
    ):
        message = f"검증 오류 [{field}]: 예상값 '{expected}', 실제값 '{value}'"
        super().__init__(message, cause)
        self.field = field
        self.value = value
        self.expected = expected
        self.details.update({"field": field, "value": str(value), "expected": expected})


# =============================================================================
# 원격 API 관련 예외
# =============================================================================


class APICallError(AFError):
    """AWS API 호출 관련 예외

    boto3/botocore의 ClientError를 래핑하여 서비스/오퍼레이션 정보를 붙입니다.
    """

    def __init__(
        self,
        service: str,
        operation: str,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        message = f"{service}.{operation}"
        if error_code:
            message = f"{message} 실패 ({error_code})"
        if error_message:
            message = f"{message}: {error_message}"

        super().__init__(message, cause)
        self.service = service
        self.operation = operation
        self.error_code = error_code
        self.error_message = error_message
        self.details.update({"service": service, "operation": operation, "error_code": error_code})

    def __str__(self) -> str:
        # ClientError 메시지는 이미 message에 포함됨
        return self.message

    @classmethod
    def from_client_error(
        cls,
        service: str,
        operation: str,
        client_error: Exception,
    ) -> "APICallError":
        """botocore.exceptions.ClientError로부터 생성

        Args:
            service: AWS 서비스 이름
            operation: API 작업 이름
            client_error: ClientError 예외

        Returns:
            APICallError 인스턴스
        """
        error_code = None
        error_message = None

        response = getattr(client_error, "response", None)
        if response is not None:
            error_info = response.get("Error", {})
            error_code = error_info.get("Code")
            error_message = error_info.get("Message")

        return cls(
            service=service,
            operation=operation,
            error_code=error_code,
            error_message=error_message or (None if response is not None else str(client_error)),
            cause=client_error,
        )


class ListingError(AFError):
    """리소스 목록 조회 실패

    원격 목록 API 자체가 실패한 경우로, 부분 결과 없이 요청 전체를 중단합니다.
    """

    def __init__(
        self,
        kind: str,
        scope: str,
        cause: Optional[Exception] = None,
        reason: str = "목록 조회 실패",
    ):
        message = f"{kind} {reason} [{scope}]"
        super().__init__(message, cause)
        self.kind = kind
        self.scope = scope
        self.details.update({"kind": kind, "scope": scope})


class ResolveError(AFError):
    """식별자 조회 실패

    보강(enrichment) 단계의 부가 조회 실패입니다.
    호출 측에서 표시 필드를 비워두고 계속 진행하는 것이 기본 정책입니다.
    """

    def __init__(
        self,
        kind: str,
        identifier: str,
        cause: Optional[Exception] = None,
    ):
        message = f"{kind} 조회 실패 [{identifier}]"
        super().__init__(message, cause)
        self.kind = kind
        self.identifier = identifier
        self.details.update({"kind": kind, "identifier": identifier})


class AggregationError(AFError):
    """Fan-out 집계 실패

    독립 작업 중 하나라도 실패하면 집계 전체를 실패로 보고합니다.
    일부만 채워진 요약은 노출하지 않습니다.
    """

    def __init__(
        self,
        aggregate: str,
        task: str,
        cause: Optional[Exception] = None,
    ):
        message = f"집계 실패 [{aggregate}] 작업 '{task}'"
        super().__init__(message, cause)
        self.aggregate = aggregate
        self.task = task
        self.details.update({"aggregate": aggregate, "task": task})


class OperationCancelledError(AFError):
    """취소 신호를 받아 작업을 중단한 경우"""

    def __init__(self, operation: str = "unknown"):
        super().__init__(f"작업이 취소되었습니다 [{operation}]")
        self.operation = operation
        self.details["operation"] = operation


class SearchConfigError(AFError):
    """검색 인덱스 설정 오류

    필드 목록이 비어 있는 등 잘못된 설정에서만 발생합니다.
    일치 항목이 없는 검색은 에러가 아니라 빈 결과입니다.
    """

    def __init__(self, kind: str, message: str):
        super().__init__(f"검색 설정 오류 [{kind}]: {message}")
        self.kind = kind
        self.details["kind"] = kind


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================

ACCESS_DENIED_CODES = {
    "AccessDenied",
    "AccessDeniedException",
    "UnauthorizedAccess",
    "UnauthorizedOperation",
}

THROTTLING_CODES = {
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
    "TooManyRequestsException",
    "RateExceeded",
}

NOT_FOUND_CODES = {
    "ResourceNotFoundException",
    "NotFoundException",
    "NoSuchEntity",
    "InvalidVpcID.NotFound",
    "InvalidSubnetID.NotFound",
    "InvalidGroup.NotFound",
    "CacheClusterNotFound",
    "CacheSubnetGroupNotFoundFault",
    "DBInstanceNotFound",
}


def _error_code(error: Exception) -> str:
    if isinstance(error, APICallError):
        return error.error_code or ""
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        return response.get("Error", {}).get("Code", "")
    return ""


def is_access_denied(error: Exception) -> bool:
    """액세스 거부 오류인지 확인"""
    return _error_code(error) in ACCESS_DENIED_CODES


def is_throttling(error: Exception) -> bool:
    """스로틀링 오류인지 확인"""
    return _error_code(error) in THROTTLING_CODES


def is_not_found(error: Exception) -> bool:
    """리소스를 찾을 수 없는 오류인지 확인"""
    return _error_code(error) in NOT_FOUND_CODES


def format_error_for_user(error: Exception) -> str:
    """사용자에게 표시할 에러 메시지 포맷팅

    Args:
        error: 예외

    Returns:
        사용자 친화적인 에러 메시지
    """
    if isinstance(error, AFError):
        return str(error)

    response = getattr(error, "response", None)
    if isinstance(response, dict):
        error_info = response.get("Error", {})
        code = error_info.get("Code", "UnknownError")
        message = error_info.get("Message", str(error))

        friendly_messages = {
            "AccessDenied": "권한이 없습니다. IAM 정책을 확인하세요.",
            "ExpiredToken": "인증 토큰이 만료되었습니다. 다시 로그인하세요.",
            "InvalidClientTokenId": "잘못된 자격 증명입니다.",
            "Throttling": "요청이 너무 많습니다. 잠시 후 다시 시도하세요.",
        }

        return friendly_messages.get(code, f"{code}: {message}")

    return str(error)
