# tests/cli/test_console.py
"""
cli/ui/console 단위 테스트

setup_logging, 상태 메시지 헬퍼
"""

import logging
from io import StringIO

import pytest
from rich.console import Console
from rich.logging import RichHandler

import importlib

console_module = importlib.import_module("cli.ui.console")


@pytest.fixture
def captured(monkeypatch):
    """전역 console을 문자열 버퍼 콘솔로 교체"""
    buffer = Console(file=StringIO(), width=200, color_system=None)
    monkeypatch.setattr(console_module, "console", buffer)
    return buffer


@pytest.fixture
def root_logger():
    """루트 logger 상태 저장/복원"""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestMessages:
    """print_* 헬퍼 테스트"""

    def test_error_symbol(self, captured):
        console_module.print_error("실패")
        assert f"{console_module.SYMBOL_ERROR} 실패" in captured.file.getvalue()

    def test_brackets_printed_literally(self, captured):
        """스코프 표기 [profile/region]이 마크업으로 해석되지 않음"""
        console_module.print_warning("vpc 목록 조회 실패 [default/ap-northeast-2]")
        assert "[default/ap-northeast-2]" in captured.file.getvalue()


class TestSetupLogging:
    def test_installs_single_rich_handler(self, root_logger):
        console_module.setup_logging(level=logging.INFO)
        console_module.setup_logging(level=logging.INFO)

        rich_handlers = [h for h in root_logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
        assert root_logger.level == logging.INFO

    def test_verbose_is_debug(self, root_logger):
        console_module.setup_logging(level=logging.WARNING, verbose=True)
        assert root_logger.level == logging.DEBUG

    def test_botocore_noise_pinned(self):
        assert logging.getLogger("botocore.credentials").level == logging.WARNING
