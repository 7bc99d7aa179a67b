"""
core/data/inventory - Resource inventory: listing, enrichment, paging

Classes:
    - CacheResolver: per-adapter ``(kind, id)`` memoizing resolver
    - *Adapter: per-kind AWS listing + enrichment
    - InventoryService: page view / fuzzy search / get over one adapter

Usage:
    from core.data.inventory import create_service

    service = create_service("vpc", session, region="ap-northeast-2")
    result = service.fetch_paginated(limit=10, page=1)
    for vpc in result.items:
        print(vpc.vpc_id, [g.gateway_id for g in vpc.gateways])
"""

from .pagination import Page, PaginationState, drain_pages, paginate
from .resolver import CacheResolver, ResolveFailure
from .searchable import (
    CACHE_CLUSTER_SCHEMA,
    DB_INSTANCE_SCHEMA,
    IAM_POLICY_SCHEMA,
    IAM_ROLE_SCHEMA,
    SUBNET_SCHEMA,
    VPC_SCHEMA,
)
from .service import RESOURCE_KINDS, InventoryService, PaginatedResult, create_service
from .services import (
    CacheClusterAdapter,
    DBInstanceAdapter,
    IAMPolicyAdapter,
    IAMRoleAdapter,
    ResourceAdapter,
    SubnetAdapter,
    VPCAdapter,
)
from .types import (
    VPC,
    CacheCluster,
    DBInstance,
    Gateway,
    IAMPolicy,
    IAMRole,
    LookupKind,
    RouteTableRef,
    SecurityGroupRef,
    Subnet,
)

__all__ = [
    # Resolver
    "CacheResolver",
    "ResolveFailure",
    # Pagination
    "paginate",
    "drain_pages",
    "Page",
    "PaginationState",
    # Service
    "InventoryService",
    "PaginatedResult",
    "RESOURCE_KINDS",
    "create_service",
    # Adapters
    "ResourceAdapter",
    "CacheClusterAdapter",
    "DBInstanceAdapter",
    "VPCAdapter",
    "SubnetAdapter",
    "IAMPolicyAdapter",
    "IAMRoleAdapter",
    # Schemas
    "CACHE_CLUSTER_SCHEMA",
    "DB_INSTANCE_SCHEMA",
    "VPC_SCHEMA",
    "SUBNET_SCHEMA",
    "IAM_POLICY_SCHEMA",
    "IAM_ROLE_SCHEMA",
    # Types
    "LookupKind",
    "CacheCluster",
    "DBInstance",
    "VPC",
    "Subnet",
    "Gateway",
    "RouteTableRef",
    "SecurityGroupRef",
    "IAMPolicy",
    "IAMRole",
]
