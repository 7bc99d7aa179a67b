"""
core/data/inventory/searchable.py - Search schemas per resource kind

Each kind only declares which attributes are searchable and which of them
are boosted; flattening, indexing and matching are shared (core.search).
"""

from __future__ import annotations

from typing import Any

from core.search import SearchSchema

from .types import VPC, CacheCluster, DBInstance, IAMPolicy, IAMRole, Subnet


def _cache_cluster_fields(c: CacheCluster) -> dict[str, Any]:
    return {
        "id": c.cluster_id,
        "display_name": c.display_name,
        "state": c.state,
        "engine": c.engine,
        "engine_version": c.engine_version,
        "node_type": c.node_type,
        "num_nodes": c.num_nodes,
        "replication_group": c.replication_group_id,
        "endpoint": c.endpoint_address or c.configuration_endpoint,
        "subnet_group": c.subnet_group,
        "vpc_id": c.vpc_id,
        "vpc_name": c.vpc_name,
        "subnet_names": c.subnet_names,
        "security_groups": c.security_group_names or c.security_group_ids,
    }


CACHE_CLUSTER_SCHEMA: SearchSchema[CacheCluster] = SearchSchema(
    kind="elasticache",
    fields=(
        "id",
        "display_name",
        "state",
        "engine",
        "engine_version",
        "node_type",
        "num_nodes",
        "replication_group",
        "endpoint",
        "subnet_group",
        "vpc_id",
        "vpc_name",
        "subnet_names",
        "security_groups",
    ),
    boosted=("display_name", "id", "vpc_name", "subnet_names", "endpoint"),
    extract=_cache_cluster_fields,
    tags=lambda c: c.tags,
)


def _db_instance_fields(d: DBInstance) -> dict[str, Any]:
    return {
        "id": d.db_instance_id,
        "display_name": d.display_name,
        "state": d.state,
        "engine": d.engine,
        "engine_version": d.engine_version,
        "instance_class": d.instance_class,
        "storage_gb": d.allocated_storage_gb,
        "multi_az": d.multi_az,
        "endpoint": d.endpoint_address,
        "subnet_group": d.subnet_group,
        "vpc_id": d.vpc_id,
        "vpc_name": d.vpc_name,
        "security_groups": d.security_group_names or d.security_group_ids,
    }


DB_INSTANCE_SCHEMA: SearchSchema[DBInstance] = SearchSchema(
    kind="rds",
    fields=(
        "id",
        "display_name",
        "state",
        "engine",
        "engine_version",
        "instance_class",
        "storage_gb",
        "multi_az",
        "endpoint",
        "subnet_group",
        "vpc_id",
        "vpc_name",
        "security_groups",
    ),
    boosted=("display_name", "id", "vpc_name", "endpoint"),
    extract=_db_instance_fields,
    tags=lambda d: d.tags,
)


def _vpc_fields(v: VPC) -> dict[str, Any]:
    return {
        "id": v.vpc_id,
        "display_name": v.display_name,
        "state": v.state,
        "cidr_block": v.cidr_block,
        "is_default": v.is_default,
        "owner_id": v.owner_id,
        "gateway_ids": [g.gateway_id for g in v.gateways],
        "gateway_names": [g.display_name for g in v.gateways],
        "peer_names": [g.peer_name for g in v.gateways],
        "subnet_names": [s.display_name for s in v.subnets],
        "subnet_cidrs": [s.cidr_block for s in v.subnets],
        "security_groups": [sg.group_name for sg in v.security_groups],
    }


VPC_SCHEMA: SearchSchema[VPC] = SearchSchema(
    kind="vpc",
    fields=(
        "id",
        "display_name",
        "state",
        "cidr_block",
        "is_default",
        "owner_id",
        "gateway_ids",
        "gateway_names",
        "peer_names",
        "subnet_names",
        "subnet_cidrs",
        "security_groups",
    ),
    boosted=("display_name", "id", "cidr_block"),
    extract=_vpc_fields,
    tags=lambda v: v.tags,
)


def _subnet_fields(s: Subnet) -> dict[str, Any]:
    return {
        "id": s.subnet_id,
        "display_name": s.display_name,
        "state": s.state,
        "cidr_block": s.cidr_block,
        "availability_zone": s.availability_zone,
        "available_ips": s.available_ip_count,
        "public": s.is_public,
        "vpc_id": s.vpc_id,
        "vpc_name": s.vpc_name,
        "route_table": s.route_table_name or s.route_table_id,
    }


SUBNET_SCHEMA: SearchSchema[Subnet] = SearchSchema(
    kind="subnet",
    fields=(
        "id",
        "display_name",
        "state",
        "cidr_block",
        "availability_zone",
        "available_ips",
        "public",
        "vpc_id",
        "vpc_name",
        "route_table",
    ),
    boosted=("display_name", "id", "cidr_block", "vpc_name"),
    extract=_subnet_fields,
    tags=lambda s: s.tags,
)


IAM_POLICY_SCHEMA: SearchSchema[IAMPolicy] = SearchSchema(
    kind="iam-policy",
    fields=("id", "display_name", "arn", "path", "description", "attachment_count", "statements"),
    boosted=("display_name", "arn"),
    extract=lambda p: {
        "id": p.policy_id,
        "display_name": p.name,
        "arn": p.arn,
        "path": p.path,
        "description": p.description,
        "attachment_count": p.attachment_count,
        "statements": p.statements,
    },
    tags=lambda p: p.tags,
)


IAM_ROLE_SCHEMA: SearchSchema[IAMRole] = SearchSchema(
    kind="iam-role",
    fields=("id", "display_name", "arn", "path", "description", "attached_policies"),
    boosted=("display_name", "arn"),
    extract=lambda r: {
        "id": r.role_id,
        "display_name": r.name,
        "arn": r.arn,
        "path": r.path,
        "description": r.description,
        "attached_policies": r.attached_policy_names,
    },
    tags=lambda r: r.tags,
)
