"""
cli/app.py - 메인 CLI 엔트리포인트

Click 기반의 CLI 애플리케이션 진입점입니다.
리소스 종류마다 같은 모양의 하위 그룹(list / search / get)을 등록합니다.

명령어 구조:
    af --version                        # 버전 표시
    af <kind> list [--limit N] [--page P] [--json]
    af <kind> search QUERY [--json]
    af <kind> get ID [--json]

    리소스 종류:
    elasticache, rds, vpc, subnet, iam-policy, iam-role

    예시:
    af -p prod elasticache list --limit 10
    af -r us-east-1 vpc search "shared-services"
    af iam-role get my-lambda-role --json

Usage:
    # 명령줄에서 직접 실행
    $ af --help

    # 모듈로 실행
    $ python -m cli.app
"""

import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

# 프로젝트 루트를 sys.path에 추가
_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import boto3  # noqa: E402
import click  # noqa: E402
from botocore.exceptions import BotoCoreError, ClientError  # noqa: E402
from click import Context  # noqa: E402

from cli.ui import print_error, print_page, print_resources, render_json, setup_logging  # noqa: E402
from core.config import get_settings, get_version  # noqa: E402
from core.data.inventory import RESOURCE_KINDS, InventoryService, create_service  # noqa: E402
from core.exceptions import AFError, OperationCancelledError, format_error_for_user  # noqa: E402
from core.parallel import CancelToken  # noqa: E402

# Keep lightweight, centralized logging config
# WARNING 레벨로 설정하여 INFO 로그가 표/JSON 출력에 섞이지 않도록 함
logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

VERSION = get_version()

KIND_HELP = {
    "elasticache": "ElastiCache 클러스터",
    "rds": "RDS DB 인스턴스",
    "vpc": "VPC (게이트웨이/서브넷/라우팅/보안그룹 요약)",
    "subnet": "VPC 서브넷",
    "iam-policy": "IAM 고객 관리형 정책",
    "iam-role": "IAM 역할",
}


def _build_service(ctx: Context, kind: str) -> InventoryService[Any]:
    """세션(profile/region)과 설정으로 서비스 생성"""
    obj = ctx.find_root().obj
    settings = obj["settings"]
    session = boto3.Session(profile_name=obj["profile"], region_name=obj["region"] or settings.default_region)
    return create_service(kind, session, region=session.region_name, settings=settings)


def _run(ctx: Context, kind: str, action: Callable[[InventoryService[Any], CancelToken], Any]) -> Any:
    """서비스 생성 + 명령 실행 + 공통 에러 처리 (에러 시 종료 코드 1, 중단 시 130)"""
    token = CancelToken()
    try:
        return action(_build_service(ctx, kind), token)
    except KeyboardInterrupt:
        token.cancel()
        print_error("사용자에 의해 중단되었습니다")
        raise SystemExit(130)
    except OperationCancelledError as e:
        print_error(str(e))
        raise SystemExit(130)
    except (AFError, ClientError, BotoCoreError) as e:
        logger.debug("명령 실패", exc_info=True)
        print_error(format_error_for_user(e))
        raise SystemExit(1)


def _make_kind_group(kind: str) -> click.Group:
    """리소스 종류 하나의 list / search / get 하위 그룹 생성"""

    @click.group(name=kind, help=KIND_HELP[kind])
    def group() -> None:
        pass

    @group.command("list")
    @click.option("-l", "--limit", type=int, default=0, help="페이지 크기 (0 이하면 기본값)")
    @click.option("-P", "--page", type=int, default=1, help="페이지 번호 (1부터)")
    @click.option("--json", "as_json", is_flag=True, help="JSON 형식으로 출력")
    @click.pass_context
    def list_command(ctx: Context, limit: int, page: int, as_json: bool) -> None:
        """목록 조회 (페이지 단위)"""
        result = _run(ctx, kind, lambda service, token: service.fetch_paginated(limit, page, cancel_token=token))
        if as_json:
            click.echo(render_json(result.items, result))
        else:
            print_page(kind, result)

    @group.command("search")
    @click.argument("query", default="")
    @click.option("--json", "as_json", is_flag=True, help="JSON 형식으로 출력")
    @click.pass_context
    def search_command(ctx: Context, query: str, as_json: bool) -> None:
        """퍼지 검색 (이름, ID, 엔드포인트, 태그 등)"""
        matched = _run(ctx, kind, lambda service, token: service.fuzzy_search(query, cancel_token=token))
        if as_json:
            click.echo(render_json(matched))
        else:
            print_resources(kind, matched, title=f"{kind} '{query}' ({len(matched)})")

    @group.command("get")
    @click.argument("resource_id")
    @click.option("--json", "as_json", is_flag=True, help="JSON 형식으로 출력")
    @click.pass_context
    def get_command(ctx: Context, resource_id: str, as_json: bool) -> None:
        """ID로 단건 조회"""
        resource = _run(ctx, kind, lambda service, token: service.get(resource_id))
        if as_json:
            click.echo(render_json([resource]))
        else:
            print_resources(kind, [resource])

    return group


@click.group()
@click.version_option(VERSION, prog_name="af")
@click.option("-p", "--profile", default=None, help="AWS 프로파일 (기본: 기본 자격 증명 체인)")
@click.option("-r", "--region", default=None, help="리전 (기본: AF_DEFAULT_REGION 또는 ap-northeast-2)")
@click.option("-v", "--verbose", is_flag=True, help="상세 로그 출력")
@click.pass_context
def cli(ctx: Context, profile: str | None, region: str | None, verbose: bool) -> None:
    """AF - AWS Finder

    AWS 리소스를 조회하고, 연관 리소스 이름으로 보강하고, 퍼지 검색합니다.
    """
    try:
        settings = get_settings()
    except AFError as e:
        print_error(format_error_for_user(e))
        raise SystemExit(1)

    setup_logging(level=settings.log_level_value, verbose=verbose)

    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile
    ctx.obj["region"] = region
    ctx.obj["settings"] = settings


for _kind in RESOURCE_KINDS:
    cli.add_command(_make_kind_group(_kind))


if __name__ == "__main__":
    cli()
