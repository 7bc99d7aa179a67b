"""
tests/core/parallel/test_cancel.py - CancelToken 테스트
"""

import threading
import time

import pytest

from core.exceptions import OperationCancelledError
from core.parallel import CancelToken


class TestCancelToken:
    """CancelToken 테스트"""

    def test_initial_state(self):
        assert not CancelToken().is_cancelled

    def test_cancel(self):
        token = CancelToken()
        token.cancel()

        assert token.is_cancelled
        with pytest.raises(OperationCancelledError) as exc_info:
            token.raise_if_cancelled("describe_vpcs")
        assert exc_info.value.operation == "describe_vpcs"

    def test_parent_cancel_propagates(self):
        """부모 취소는 자식에 전파되지만 반대는 아님"""
        parent = CancelToken()
        child = CancelToken(parent=parent)

        child.cancel()
        assert not parent.is_cancelled

        other = CancelToken(parent=parent)
        parent.cancel()
        assert other.is_cancelled

    def test_wait_times_out(self):
        assert CancelToken().wait(0.01) is False

    def test_wait_returns_on_parent_cancel(self):
        parent = CancelToken()
        child = CancelToken(parent=parent)

        timer = threading.Timer(0.05, parent.cancel)
        timer.start()
        start = time.monotonic()
        try:
            assert child.wait(5) is True
        finally:
            timer.join()
        assert time.monotonic() - start < 2
