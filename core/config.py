"""
core/config.py - 중앙 설정 관리

환경 변수(AF_*)에서 실행 설정을 읽어 Settings 데이터클래스로 제공합니다.

환경 변수:
    AF_PAGE_SIZE          목록 기본 페이지 크기 (기본: 20)
    AF_FANOUT_WORKERS     fan-out 최대 동시 작업 수 (기본: 8)
    AF_FANOUT_TIMEOUT     fan-out 전체 대기 시간(초, 0이면 무제한)
    AF_MAX_RETRIES        스로틀링 재시도 횟수 (기본: 3)
    AF_DEFAULT_REGION     기본 리전 (AWS_DEFAULT_REGION보다 우선)
    AF_LOG_LEVEL          로그 레벨 (기본: WARNING)

Usage:
    from core.config import get_settings, get_default_region

    limit = get_settings().page_size
    region = get_default_region()
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from core.exceptions import ConfigError

VERSION = "0.4.0"

DEFAULT_REGION = "ap-northeast-2"
DEFAULT_PAGE_SIZE = 20
DEFAULT_FANOUT_WORKERS = 8

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def get_version() -> str:
    """버전 문자열 반환"""
    return VERSION


@dataclass(frozen=True)
class Settings:
    """실행 설정

    Attributes:
        page_size: limit 미지정(<=0) 시 사용할 페이지 크기
        fanout_workers: fan-out 작업 동시 실행 수 상한
        fanout_timeout: fan-out 전체 대기 시간(초), 0이면 무제한
        max_retries: 스로틀링/일시 오류 재시도 횟수
        default_region: 리전 미지정 시 사용할 리전
        log_level: 로깅 레벨 이름
    """

    page_size: int = DEFAULT_PAGE_SIZE
    fanout_workers: int = DEFAULT_FANOUT_WORKERS
    fanout_timeout: float = 0.0
    max_retries: int = 3
    default_region: str = DEFAULT_REGION
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ConfigError("page_size", f"1 이상이어야 합니다: {self.page_size}")
        if not 1 <= self.fanout_workers <= 32:
            raise ConfigError("fanout_workers", f"1~32 범위여야 합니다: {self.fanout_workers}")
        if self.fanout_timeout < 0:
            raise ConfigError("fanout_timeout", f"음수일 수 없습니다: {self.fanout_timeout}")
        if self.max_retries < 0:
            raise ConfigError("max_retries", f"음수일 수 없습니다: {self.max_retries}")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigError("log_level", f"알 수 없는 레벨: {self.log_level}")

    @property
    def log_level_value(self) -> int:
        """logging 모듈의 숫자 레벨"""
        return int(getattr(logging, self.log_level.upper()))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """환경 변수에서 Settings 생성

        Args:
            environ: 환경 변수 매핑 (None이면 os.environ)

        Returns:
            Settings 인스턴스

        Raises:
            ConfigError: 값 형식이 잘못된 경우
        """
        env = os.environ if environ is None else environ

        def _int(key: str, default: int) -> int:
            raw = env.get(key, "").strip()
            if not raw:
                return default
            try:
                return int(raw)
            except ValueError as e:
                raise ConfigError(key, f"정수가 아닙니다: {raw!r}", cause=e) from e

        def _float(key: str, default: float) -> float:
            raw = env.get(key, "").strip()
            if not raw:
                return default
            try:
                return float(raw)
            except ValueError as e:
                raise ConfigError(key, f"숫자가 아닙니다: {raw!r}", cause=e) from e

        region = env.get("AF_DEFAULT_REGION") or env.get("AWS_DEFAULT_REGION") or DEFAULT_REGION

        return cls(
            page_size=_int("AF_PAGE_SIZE", DEFAULT_PAGE_SIZE),
            fanout_workers=_int("AF_FANOUT_WORKERS", DEFAULT_FANOUT_WORKERS),
            fanout_timeout=_float("AF_FANOUT_TIMEOUT", 0.0),
            max_retries=_int("AF_MAX_RETRIES", 3),
            default_region=region,
            log_level=env.get("AF_LOG_LEVEL", "WARNING") or "WARNING",
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """프로세스 설정 반환 (최초 호출 시 환경 변수에서 로드)"""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """캐시된 설정 초기화 (테스트용)"""
    global _settings
    _settings = None


def get_default_region() -> str:
    """기본 리전 반환"""
    return get_settings().default_region
