"""
core/parallel/cancel.py - 협조적 취소 신호

스레드는 외부에서 강제로 중단할 수 없으므로, 작업은 페이지 경계 등
안전한 지점에서 CancelToken을 확인하고 스스로 중단합니다.

부모 토큰이 취소되면 자식 토큰도 취소된 것으로 간주합니다.
(요청 단위 토큰 → fan-out 단위 토큰)

Example:
    request_token = CancelToken()
    fanout_token = CancelToken(parent=request_token)

    request_token.cancel()
    fanout_token.is_cancelled  # True
"""

from __future__ import annotations

import threading

from core.exceptions import OperationCancelledError


class CancelToken:
    """취소 신호 (threading.Event 기반)"""

    def __init__(self, parent: CancelToken | None = None):
        self._event = threading.Event()
        self._parent = parent

    @property
    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.is_cancelled

    def cancel(self) -> None:
        """이 토큰과 모든 자식 토큰을 취소 상태로 전환"""
        self._event.set()

    def raise_if_cancelled(self, operation: str = "unknown") -> None:
        """취소되었으면 OperationCancelledError 발생"""
        if self.is_cancelled:
            raise OperationCancelledError(operation)

    def wait(self, timeout: float) -> bool:
        """취소되거나 timeout이 지날 때까지 대기

        재시도 백오프 대기 중에도 취소에 반응하기 위해 사용합니다.

        Returns:
            취소되었으면 True
        """
        if self._parent is None:
            return self._event.wait(timeout)

        # 부모 취소도 감지해야 하므로 짧은 간격으로 확인
        remaining = timeout
        step = 0.05
        while remaining > 0:
            if self.is_cancelled:
                return True
            self._event.wait(min(step, remaining))
            remaining -= step
        return self.is_cancelled

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.is_cancelled})"
