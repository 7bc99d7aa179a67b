"""
core/data/inventory/types.py - Resource dataclasses for inventory

Plain, always-present values: optional API attributes are resolved to
"" / 0 / [] / {} at the adapter boundary so downstream code never
null-checks (timestamps are the only exception).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class LookupKind(str, Enum):
    """Identifier kinds resolved through the adapter's CacheResolver"""

    VPC = "vpc"
    SUBNET = "subnet"
    SECURITY_GROUP = "security_group"
    CACHE_SUBNET_GROUP = "cache_subnet_group"
    VPC_ROUTE_TABLES = "vpc_route_tables"
    POLICY = "policy"
    ROLE_POLICIES = "role_policies"


@dataclass
class CacheCluster:
    """ElastiCache cluster (Redis / Valkey / Memcached)"""

    cluster_id: str
    display_name: str = ""
    state: str = ""
    engine: str = ""
    engine_version: str = ""
    node_type: str = ""
    num_nodes: int = 0
    replication_group_id: str = ""
    endpoint_address: str = ""
    endpoint_port: int = 0
    configuration_endpoint: str = ""
    subnet_group: str = ""
    arn: str = ""
    created_at: datetime | None = None
    tags: dict[str, str] = field(default_factory=dict)

    # Cross-referenced (enrichment)
    vpc_id: str = ""
    vpc_name: str = ""
    subnet_ids: list[str] = field(default_factory=list)
    subnet_names: list[str] = field(default_factory=list)
    security_group_ids: list[str] = field(default_factory=list)
    security_group_names: list[str] = field(default_factory=list)

    # Metadata
    account_id: str = ""
    region: str = ""

    @property
    def is_available(self) -> bool:
        return self.state == "available"


@dataclass
class DBInstance:
    """RDS DB instance"""

    db_instance_id: str
    display_name: str = ""
    state: str = ""
    engine: str = ""
    engine_version: str = ""
    instance_class: str = ""
    allocated_storage_gb: int = 0
    multi_az: bool = False
    endpoint_address: str = ""
    endpoint_port: int = 0
    subnet_group: str = ""
    arn: str = ""
    created_at: datetime | None = None
    tags: dict[str, str] = field(default_factory=dict)

    # Cross-referenced (enrichment)
    vpc_id: str = ""
    vpc_name: str = ""
    subnet_ids: list[str] = field(default_factory=list)
    security_group_ids: list[str] = field(default_factory=list)
    security_group_names: list[str] = field(default_factory=list)

    # Metadata
    account_id: str = ""
    region: str = ""

    @property
    def is_available(self) -> bool:
        return self.state == "available"


@dataclass
class Gateway:
    """Gateway attached to a VPC (internet, NAT, endpoint, TGW attachment, peering)"""

    gateway_id: str
    gateway_type: str
    display_name: str = ""
    state: str = ""
    # Peering / TGW: the resource on the other side
    peer_id: str = ""
    peer_name: str = ""


@dataclass
class Subnet:
    """VPC subnet"""

    subnet_id: str
    display_name: str = ""
    state: str = ""
    cidr_block: str = ""
    availability_zone: str = ""
    available_ip_count: int = 0
    map_public_ip_on_launch: bool = False
    is_default: bool = False
    arn: str = ""
    tags: dict[str, str] = field(default_factory=dict)

    # Cross-referenced (enrichment)
    vpc_id: str = ""
    vpc_name: str = ""
    route_table_id: str = ""
    route_table_name: str = ""

    # Metadata
    account_id: str = ""
    region: str = ""

    @property
    def is_public(self) -> bool:
        return self.map_public_ip_on_launch


@dataclass
class RouteTableRef:
    """Route table summary"""

    route_table_id: str
    display_name: str = ""
    is_main: bool = False
    route_count: int = 0


@dataclass
class SecurityGroupRef:
    """Security group summary"""

    group_id: str
    group_name: str = ""
    description: str = ""
    inbound_rule_count: int = 0
    outbound_rule_count: int = 0


@dataclass
class VPC:
    """VPC with its fan-out summary"""

    vpc_id: str
    display_name: str = ""
    state: str = ""
    cidr_block: str = ""
    is_default: bool = False
    owner_id: str = ""
    dhcp_options_id: str = ""
    tags: dict[str, str] = field(default_factory=dict)

    # Fan-out summary (enrichment)
    gateways: list[Gateway] = field(default_factory=list)
    subnets: list[Subnet] = field(default_factory=list)
    route_tables: list[RouteTableRef] = field(default_factory=list)
    security_groups: list[SecurityGroupRef] = field(default_factory=list)
    enriched: bool = False

    # Metadata
    account_id: str = ""
    region: str = ""

    def gateways_of(self, gateway_type: str) -> list[Gateway]:
        return [g for g in self.gateways if g.gateway_type == gateway_type]


@dataclass
class IAMPolicy:
    """Customer managed IAM policy"""

    policy_id: str
    name: str = ""
    arn: str = ""
    path: str = ""
    description: str = ""
    attachment_count: int = 0
    default_version_id: str = ""
    is_attachable: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    statements: list[str] = field(default_factory=list)
    tags: dict[str, str] = field(default_factory=dict)

    # Metadata
    account_id: str = ""

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def is_unused(self) -> bool:
        return self.attachment_count == 0


@dataclass
class IAMRole:
    """IAM role"""

    role_id: str
    name: str = ""
    arn: str = ""
    path: str = ""
    description: str = ""
    max_session_duration: int = 0
    created_at: datetime | None = None
    attached_policy_names: list[str] = field(default_factory=list)
    tags: dict[str, str] = field(default_factory=dict)

    # Metadata
    account_id: str = ""

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def is_service_linked(self) -> bool:
        return self.path.startswith("/aws-service-role/")
