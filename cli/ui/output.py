"""
cli/ui/output.py - 리소스 표/JSON 출력

리소스 종류별 표 컬럼을 선언하고 rich Table 또는 JSON으로 출력합니다.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Callable, Sequence
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from core.data.inventory import PaginatedResult

from .console import console as default_console

Column = tuple[str, Callable[[Any], Any]]


def _join(values: Sequence[str]) -> str:
    return ", ".join(v for v in values if v)


def _endpoint(address: str, port: int) -> str:
    if not address:
        return ""
    return f"{address}:{port}" if port else address


COLUMNS: dict[str, list[Column]] = {
    "elasticache": [
        ("Name", lambda c: c.display_name),
        ("Engine", lambda c: f"{c.engine} {c.engine_version}".strip()),
        ("Node Type", lambda c: c.node_type),
        ("Nodes", lambda c: c.num_nodes),
        ("State", lambda c: c.state),
        ("Endpoint", lambda c: _endpoint(c.endpoint_address, c.endpoint_port)),
        ("VPC", lambda c: c.vpc_name or c.vpc_id),
        ("Subnets", lambda c: _join(c.subnet_names) or _join(c.subnet_ids)),
        ("Security Groups", lambda c: _join(c.security_group_names) or _join(c.security_group_ids)),
    ],
    "rds": [
        ("Name", lambda d: d.display_name),
        ("Engine", lambda d: f"{d.engine} {d.engine_version}".strip()),
        ("Class", lambda d: d.instance_class),
        ("Storage", lambda d: f"{d.allocated_storage_gb} GB" if d.allocated_storage_gb else ""),
        ("Multi-AZ", lambda d: "Y" if d.multi_az else ""),
        ("State", lambda d: d.state),
        ("Endpoint", lambda d: _endpoint(d.endpoint_address, d.endpoint_port)),
        ("VPC", lambda d: d.vpc_name or d.vpc_id),
        ("Security Groups", lambda d: _join(d.security_group_names) or _join(d.security_group_ids)),
    ],
    "vpc": [
        ("Name", lambda v: v.display_name),
        ("VPC ID", lambda v: v.vpc_id),
        ("CIDR", lambda v: v.cidr_block),
        ("State", lambda v: v.state),
        ("Default", lambda v: "Y" if v.is_default else ""),
        ("Subnets", lambda v: len(v.subnets) if v.enriched else ""),
        (
            "Gateways",
            lambda v: _join([f"{g.gateway_type}:{g.peer_name or g.display_name or g.gateway_id}" for g in v.gateways]),
        ),
    ],
    "subnet": [
        ("Name", lambda s: s.display_name),
        ("Subnet ID", lambda s: s.subnet_id),
        ("CIDR", lambda s: s.cidr_block),
        ("AZ", lambda s: s.availability_zone),
        ("Free IPs", lambda s: s.available_ip_count),
        ("Public", lambda s: "Y" if s.is_public else ""),
        ("VPC", lambda s: s.vpc_name or s.vpc_id),
        ("Route Table", lambda s: s.route_table_name or s.route_table_id),
    ],
    "iam-policy": [
        ("Name", lambda p: p.name),
        ("Path", lambda p: p.path),
        ("Attachments", lambda p: p.attachment_count),
        ("Version", lambda p: p.default_version_id),
        ("Statements", lambda p: len(p.statements)),
        ("ARN", lambda p: p.arn),
    ],
    "iam-role": [
        ("Name", lambda r: r.name),
        ("Path", lambda r: r.path),
        ("Policies", lambda r: _join(r.attached_policy_names)),
        ("Max Session", lambda r: f"{r.max_session_duration}s" if r.max_session_duration else ""),
        ("ARN", lambda r: r.arn),
    ],
}


def to_dict(resource: Any) -> dict[str, Any]:
    """리소스 dataclass → JSON 직렬화용 dict"""
    if dataclasses.is_dataclass(resource) and not isinstance(resource, type):
        return dataclasses.asdict(resource)
    return dict(resource)


def _cell(value: Any) -> str:
    if value is None or value == 0 or value == "":
        return "-"
    return escape(str(value))


def build_table(kind: str, resources: Sequence[Any], title: str | None = None) -> Table:
    """리소스 목록으로 rich Table 생성"""
    columns = COLUMNS[kind]
    table = Table(title=title, show_header=True, header_style="bold")
    for index, (header, _) in enumerate(columns):
        table.add_column(header, style="cyan" if index == 0 else None, overflow="fold")
    for resource in resources:
        table.add_row(*[_cell(getter(resource)) for _, getter in columns])
    return table


def print_resources(
    kind: str,
    resources: Sequence[Any],
    title: str | None = None,
    console: Console | None = None,
) -> None:
    """리소스 표 출력 (없으면 안내 문구)"""
    out = console or default_console
    if not resources:
        out.print("[dim]조회된 리소스가 없습니다.[/dim]")
        return
    out.print(build_table(kind, resources, title=title))


def print_page(kind: str, result: PaginatedResult[Any], console: Console | None = None) -> None:
    """페이지 결과 표 + 페이지 안내 출력"""
    out = console or default_console
    print_resources(kind, result.items, title=f"{kind} ({result.total_count})", console=out)
    if not result.enriched:
        out.print("[yellow]! 연관 리소스 조회에 실패해 기본 정보만 표시합니다.[/yellow]")
    if result.has_next:
        out.print(f"[dim]다음 페이지: --page {escape(result.next_page_token)} --limit {result.limit}[/dim]")


def render_json(resources: Sequence[Any], result: PaginatedResult[Any] | None = None) -> str:
    """리소스 목록(및 페이지 정보)을 JSON 문자열로 변환"""
    data: dict[str, Any] = {"items": [to_dict(r) for r in resources]}
    if result is not None:
        data["pagination"] = {
            "total_count": result.total_count,
            "page": result.page,
            "limit": result.limit,
            "next_page_token": result.next_page_token,
        }
    return json.dumps(data, ensure_ascii=False, indent=2, default=str)
