# cli/ui - 콘솔 출력 컴포넌트 (rich)
"""
콘솔 출력 모듈

CLI 전용 출력 컴포넌트들 (로그 설정, 메시지, 리소스 표/JSON)
"""

from .console import (
    SYMBOL_ERROR,
    SYMBOL_WARNING,
    console,
    get_console,
    print_error,
    print_warning,
    setup_logging,
)
from .output import COLUMNS, build_table, print_page, print_resources, render_json, to_dict

__all__ = [
    # Console
    "console",
    "get_console",
    "setup_logging",
    "print_error",
    "print_warning",
    "SYMBOL_ERROR",
    "SYMBOL_WARNING",
    # Output
    "COLUMNS",
    "build_table",
    "print_resources",
    "print_page",
    "render_json",
    "to_dict",
]
