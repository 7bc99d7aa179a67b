"""
core/parallel - 동시 실행 모듈

보강(enrichment) 단계에서 독립적인 조회를 동시에 실행하고 합치는 기능을 제공합니다.

주요 구성 요소:
- FanOutAggregator: join all or fail fast 집계기
- CancelToken: 협조적 취소 신호
- call_with_retry: 스로틀링 재시도 래퍼

Example:
    from core.parallel import CancelToken, FanOutAggregator

    token = CancelToken()
    result = FanOutAggregator("vpc:vpc-0abc").run(
        {"nat": list_nats, "internet": list_igws},
        cancel_token=token,
    )
"""

from .cancel import CancelToken
from .client import get_client
from .fanout import FanOutAggregator, FanOutResult
from .retry import RetryConfig, call_with_retry, categorize_error, get_error_code, is_retryable
from .types import ErrorCategory

__all__: list[str] = [
    # Fan-out
    "FanOutAggregator",
    "FanOutResult",
    "CancelToken",
    # Client
    "get_client",
    # Retry
    "RetryConfig",
    "call_with_retry",
    "categorize_error",
    "get_error_code",
    "is_retryable",
    # Types
    "ErrorCategory",
]
