"""
core/parallel/retry.py - AWS API 에러 분류 및 재시도

AWS API 호출 실패를 ErrorCategory로 분류하고, 스로틀링/일시 오류에 대해
지수 백오프(full jitter)로 재시도합니다.

주요 구성 요소:
- RetryConfig: 재시도 설정
- categorize_error / get_error_code / is_retryable: 에러 분류
- call_with_retry: 재시도 + 취소 신호를 반영한 호출 래퍼

Example:
    resp = call_with_retry(
        lambda: ec2.describe_vpcs(VpcIds=[vpc_id]),
        operation="ec2.describe_vpcs",
        cancel_token=token,
    )
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from core.exceptions import OperationCancelledError, is_access_denied, is_not_found, is_throttling

from .cancel import CancelToken
from .types import ErrorCategory

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """재시도 설정

    Attributes:
        max_retries: 최대 재시도 횟수 (0이면 재시도 안함)
        base_delay: 기본 대기 시간 (초)
        max_delay: 최대 대기 시간 (초)
        exponential_base: 지수 백오프 밑수
        jitter: 지터 사용 여부 (대기 시간에 랜덤성 추가)
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 32.0
    exponential_base: float = 2.0
    jitter: bool = True

    def get_delay(self, attempt: int) -> float:
        """attempt(0부터)번째 실패 후 대기 시간 계산"""
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)
        if self.jitter:
            # Full jitter: [0, delay]
            delay = random.uniform(0, delay)
        return delay


# 재시도 가능한 AWS 에러 코드
RETRYABLE_ERROR_CODES: set[str] = {
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
    "TooManyRequestsException",
    "RateExceeded",
    "ServiceUnavailable",
    "ServiceUnavailableException",
    "InternalError",
    "InternalFailure",
    "RequestTimeout",
    "RequestTimeoutException",
}


def get_error_code(error: BaseException) -> str:
    """예외에서 에러 코드 추출 (ClientError가 아니면 클래스명)"""
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        code: str = response.get("Error", {}).get("Code", "Unknown")
        return code
    return error.__class__.__name__


def categorize_error(error: BaseException) -> ErrorCategory:
    """예외를 ErrorCategory로 분류"""
    if isinstance(error, OperationCancelledError):
        return ErrorCategory.CANCELLED
    if not isinstance(error, Exception):
        return ErrorCategory.UNKNOWN
    if is_throttling(error):
        return ErrorCategory.THROTTLING
    if is_access_denied(error):
        return ErrorCategory.ACCESS_DENIED
    if is_not_found(error):
        return ErrorCategory.NOT_FOUND

    code = get_error_code(error)
    if "Timeout" in code:
        return ErrorCategory.TIMEOUT
    if code in ("ExpiredToken", "ExpiredTokenException"):
        return ErrorCategory.EXPIRED_TOKEN
    if code in RETRYABLE_ERROR_CODES:
        return ErrorCategory.SERVICE_ERROR
    if code.startswith("Invalid") or "Validation" in code:
        return ErrorCategory.INVALID_REQUEST

    if isinstance(error, (ConnectionError, TimeoutError)):
        return ErrorCategory.NETWORK

    return ErrorCategory.UNKNOWN


def is_retryable(error: BaseException) -> bool:
    """재시도 가능한 에러인지 확인"""
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        return response.get("Error", {}).get("Code", "") in RETRYABLE_ERROR_CODES
    return isinstance(error, (ConnectionError, TimeoutError))


def call_with_retry(
    func: Callable[[], T],
    operation: str,
    retry_config: RetryConfig | None = None,
    cancel_token: CancelToken | None = None,
) -> T:
    """재시도 가능한 에러에 대해 지수 백오프로 재시도하며 func 호출

    재시도 불가능한 에러나 재시도 소진 시 마지막 예외를 그대로 전파합니다.
    대기 중 취소 신호가 오면 OperationCancelledError를 발생시킵니다.

    Args:
        func: 인자 없는 호출 함수
        operation: 로그용 작업 이름 (예: "ec2.describe_vpcs")
        retry_config: 재시도 설정 (None이면 기본값)
        cancel_token: 취소 신호 (선택)

    Returns:
        func의 반환값
    """
    config = retry_config or RetryConfig()

    attempt = 0
    while True:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(operation)
        try:
            return func()
        except Exception as e:
            if not is_retryable(e) or attempt >= config.max_retries:
                raise

            delay = config.get_delay(attempt)
            logger.debug(f"[{operation}] 시도 {attempt + 1} 실패 ({get_error_code(e)}), {delay:.2f}초 후 재시도")

            if cancel_token is not None:
                if cancel_token.wait(delay):
                    raise OperationCancelledError(operation) from e
            else:
                time.sleep(delay)
            attempt += 1
