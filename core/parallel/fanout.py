"""
core/parallel/fanout.py - Fan-out 집계기 (join all or fail fast)

하나의 요약 값을 만들기 위해 서로 독립적인 여러 조회를 동시에 실행하고,
모두 완료되면 결과를 하나로 합칩니다. (예: VPC 하나에 연결된 게이트웨이 종류별 조회)

규칙:
- 모든 작업은 같은 CancelToken을 공유합니다.
- 작업 하나가 실패하면 토큰을 취소하고, 아직 시작하지 않은 작업은 취소하며,
  실행 중인 작업이 끝날 때까지 기다린 뒤(join) AggregationError를 발생시킵니다.
- 성공한 작업이 남긴 결과는 실패 시 모두 버려집니다. (all-or-nothing)
- 각 작업은 자기 이름의 키에만 결과를 씁니다. 쓰기는 하나의 Lock으로 직렬화합니다.
- executor는 with 블록으로 닫히므로 반환 이후 남는 스레드가 없습니다.

Example:
    aggregator = FanOutAggregator("vpc:vpc-0abc", max_workers=5)

    result = aggregator.run(
        {
            "internet": lambda token: list_igws(vpc_id, token),
            "nat": lambda token: list_nats(vpc_id, token),
        },
        cancel_token=request_token,
    )
    gateways = result["internet"] + result["nat"]
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterator, Mapping
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Any

from core.exceptions import AggregationError, OperationCancelledError

from .cancel import CancelToken
from .retry import categorize_error, get_error_code

logger = logging.getLogger(__name__)

FanOutFunc = Callable[[CancelToken], Any]


class FanOutResult(Mapping[str, Any]):
    """모든 작업이 성공했을 때만 만들어지는 읽기 전용 결과

    작업 이름 → 작업 반환값 매핑입니다.
    """

    def __init__(self, values: Mapping[str, Any], duration_ms: float = 0.0):
        self._values = dict(values)
        self.duration_ms = duration_ms

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"FanOutResult(tasks={sorted(self._values)}, duration_ms={self.duration_ms:.0f})"


class FanOutAggregator:
    """독립 조회 작업을 동시에 실행하고 한 번에 합치는 집계기

    Attributes:
        name: 집계 대상 이름 (에러/로그 컨텍스트용, 예: "vpc:vpc-0abc")
        max_workers: 동시 실행 작업 수 상한
        timeout: 전체 대기 시간(초). None이면 무제한
    """

    def __init__(self, name: str, max_workers: int = 8, timeout: float | None = None):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.name = name
        self.max_workers = max_workers
        self.timeout = timeout if timeout else None

    def run(
        self,
        tasks: Mapping[str, FanOutFunc],
        cancel_token: CancelToken | None = None,
    ) -> FanOutResult:
        """모든 작업을 동시에 실행하고 결과를 합침

        Args:
            tasks: 작업 이름 → (CancelToken) -> 결과 함수
            cancel_token: 호출자 취소 신호 (선택). 취소되면 모든 작업에 전파됨

        Returns:
            FanOutResult: 모든 작업의 결과

        Raises:
            AggregationError: 작업 중 하나라도 실패한 경우 (처음 관찰된 에러)
            OperationCancelledError: 호출자가 취소한 경우
        """
        token = CancelToken(parent=cancel_token)
        token.raise_if_cancelled(self.name)

        if not tasks:
            return FanOutResult({})

        staged: dict[str, Any] = {}
        lock = threading.Lock()
        first_error: tuple[str, BaseException] | None = None
        start_time = time.monotonic()

        logger.debug(f"fan-out 시작 [{self.name}]: {len(tasks)}개 작업")

        workers = min(self.max_workers, len(tasks))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fanout") as executor:
            futures: dict[Future[None], str] = {
                executor.submit(self._run_task, name, func, token, staged, lock): name
                for name, func in tasks.items()
            }

            try:
                for future in as_completed(futures, timeout=self.timeout):
                    name = futures[future]
                    try:
                        future.result()
                    except CancelledError:
                        continue
                    except Exception as e:
                        if first_error is None:
                            first_error = (name, e)
                            self._abort(token, futures)
            except FuturesTimeoutError:
                first_error = ("timeout", TimeoutError(f"{self.timeout}초 내에 완료되지 않음"))
                self._abort(token, futures)

        duration_ms = (time.monotonic() - start_time) * 1000

        if first_error is not None:
            task_name, error = first_error
            if isinstance(error, OperationCancelledError) and cancel_token is not None and cancel_token.is_cancelled:
                raise error
            logger.debug(
                f"fan-out 실패 [{self.name}] 작업 '{task_name}': "
                f"{categorize_error(error).value}/{get_error_code(error)}, 부분 결과 폐기"
            )
            raise AggregationError(self.name, task_name, cause=error if isinstance(error, Exception) else None) from error

        if token.is_cancelled:
            raise OperationCancelledError(self.name)

        logger.debug(f"fan-out 완료 [{self.name}]: {len(staged)}개 작업, {duration_ms:.0f}ms")
        return FanOutResult(staged, duration_ms=duration_ms)

    @staticmethod
    def _abort(token: CancelToken, futures: Mapping[Future[None], str]) -> None:
        """취소 신호를 보내고 아직 시작하지 않은 작업을 취소"""
        token.cancel()
        for future in futures:
            future.cancel()

    @staticmethod
    def _run_task(
        name: str,
        func: FanOutFunc,
        token: CancelToken,
        staged: dict[str, Any],
        lock: threading.Lock,
    ) -> None:
        """워커 스레드에서 작업 하나 실행 후 결과를 staged에 기록"""
        token.raise_if_cancelled(name)
        value = func(token)
        with lock:
            staged[name] = value
