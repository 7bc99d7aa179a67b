"""
tests/conftest.py - pytest 공통 픽스처

AWS API 모킹과 테스트 헬퍼를 제공합니다.

Usage:
    def test_something(mock_session, mock_clients):
        # mock_session: 서비스별 MagicMock client를 돌려주는 boto3.Session 대역
        # mock_clients: 서비스 이름 → MagicMock client
        ec2 = mock_clients["ec2"]
        ec2.describe_vpcs.return_value = {"Vpcs": []}
"""

import os
import sys
from collections import defaultdict
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from core.config import Settings, reset_settings  # noqa: E402

# =============================================================================
# 환경 설정
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """테스트 환경 설정 (moto용 가짜 자격 증명, AF_* 변수 제거)"""
    monkeypatch.setenv("AWS_DEFAULT_REGION", "ap-northeast-2")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    for key in list(os.environ):
        if key.startswith("AF_"):
            monkeypatch.delenv(key, raising=False)

    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def test_settings() -> Settings:
    """재시도 없는 테스트용 설정"""
    return Settings(max_retries=0, fanout_workers=4)


# =============================================================================
# AWS 모킹 픽스처
# =============================================================================


@pytest.fixture
def mock_clients() -> dict[str, MagicMock]:
    """서비스 이름 → MagicMock client (처음 접근 시 생성)"""
    return defaultdict(MagicMock)


@pytest.fixture
def mock_session(mock_clients):
    """boto3.Session 대역

    session.client("ec2", ...)는 mock_clients["ec2"]를 반환합니다.
    """
    session = MagicMock()
    session.profile_name = "test"
    session.region_name = "ap-northeast-2"
    session.client.side_effect = lambda service_name, **kwargs: mock_clients[service_name]
    return session


def set_pages(client: MagicMock, pages_by_operation: dict[str, list[dict[str, Any]]]) -> None:
    """client.get_paginator(operation).paginate()가 operation별 페이지를 돌려주도록 설정

    등록하지 않은 operation은 빈 페이지 하나를 반환합니다.
    """

    def _get_paginator(operation: str) -> MagicMock:
        paginator = MagicMock()
        paginator.paginate.side_effect = lambda **kwargs: iter(pages_by_operation.get(operation, [{}]))
        return paginator

    client.get_paginator.side_effect = _get_paginator


def make_client_error(code: str, operation: str = "Operation", message: str = "error") -> ClientError:
    """botocore ClientError 생성 헬퍼"""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@pytest.fixture
def pages():
    """set_pages 헬퍼 픽스처"""
    return set_pages


@pytest.fixture
def client_error():
    """make_client_error 헬퍼 픽스처"""
    return make_client_error
