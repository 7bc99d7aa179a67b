"""
core/data/inventory/services/vpc.py - VPC and subnet adapters

A VPC summary needs eight independent lookups (five gateway kinds, subnets,
route tables, security groups). They run together through a
FanOutAggregator per VPC: either every lookup succeeds and the VPC is
marked enriched, or the whole summary fails with AggregationError.
"""

from __future__ import annotations

import logging
from typing import Any

from core.exceptions import APICallError
from core.parallel import CancelToken, FanOutAggregator

from ..types import VPC, Gateway, LookupKind, RouteTableRef, SecurityGroupRef, Subnet
from .base import BaseAdapter, account_from_arn, ec2_name, tags_to_dict

logger = logging.getLogger(__name__)

# Gateways are merged in this order
GATEWAY_TASKS: tuple[str, ...] = ("internet", "nat", "endpoint", "tgw", "peering")


def _vpc_filter(vpc_id: str, name: str = "vpc-id") -> list[dict[str, Any]]:
    return [{"Name": name, "Values": [vpc_id]}]


def parse_subnet(data: dict[str, Any], region: str, account_id: str = "") -> Subnet:
    """Raw ``describe_subnets`` entry to Subnet"""
    subnet_id = data.get("SubnetId", "")
    arn = data.get("SubnetArn", "")
    return Subnet(
        subnet_id=subnet_id,
        display_name=ec2_name(data) or subnet_id,
        state=data.get("State", ""),
        cidr_block=data.get("CidrBlock", ""),
        availability_zone=data.get("AvailabilityZone", ""),
        available_ip_count=data.get("AvailableIpAddressCount", 0),
        map_public_ip_on_launch=data.get("MapPublicIpOnLaunch", False),
        is_default=data.get("DefaultForAz", False),
        arn=arn,
        tags=tags_to_dict(data.get("Tags")),
        vpc_id=data.get("VpcId", ""),
        account_id=account_id or data.get("OwnerId", "") or account_from_arn(arn),
        region=region,
    )


def route_table_for_subnet(route_tables: list[dict[str, Any]], subnet_id: str) -> dict[str, Any] | None:
    """Route table explicitly associated with the subnet, else the VPC's main table"""
    main = None
    for table in route_tables:
        for assoc in table.get("Associations", []):
            if assoc.get("SubnetId") == subnet_id:
                return table
            if assoc.get("Main"):
                main = table
    return main


def _parse_route_table(data: dict[str, Any]) -> RouteTableRef:
    table_id = data.get("RouteTableId", "")
    return RouteTableRef(
        route_table_id=table_id,
        display_name=ec2_name(data) or table_id,
        is_main=any(a.get("Main") for a in data.get("Associations", [])),
        route_count=len(data.get("Routes", [])),
    )


def _parse_security_group(data: dict[str, Any]) -> SecurityGroupRef:
    return SecurityGroupRef(
        group_id=data.get("GroupId", ""),
        group_name=data.get("GroupName", ""),
        description=data.get("Description", ""),
        inbound_rule_count=len(data.get("IpPermissions", [])),
        outbound_rule_count=len(data.get("IpPermissionsEgress", [])),
    )


class VPCAdapter(BaseAdapter[VPC]):
    """VPCs in one session/region, enriched by a per-VPC fan-out"""

    kind = "vpc"

    def _list_page(self, page_token: str) -> tuple[list[VPC], str]:
        params: dict[str, Any] = {}
        if page_token:
            params["NextToken"] = page_token
        resp = self._call("ec2", "describe_vpcs", **params)

        vpcs = []
        for data in resp.get("Vpcs", []):
            self.resolver.prime(LookupKind.VPC, data.get("VpcId", ""), data)
            vpcs.append(self._parse(data))
        return vpcs, resp.get("NextToken", "") or ""

    def _parse(self, data: dict[str, Any]) -> VPC:
        vpc_id = data.get("VpcId", "")
        return VPC(
            vpc_id=vpc_id,
            display_name=ec2_name(data) or vpc_id,
            state=data.get("State", ""),
            cidr_block=data.get("CidrBlock", ""),
            is_default=data.get("IsDefault", False),
            owner_id=data.get("OwnerId", ""),
            dhcp_options_id=data.get("DhcpOptionsId", ""),
            tags=tags_to_dict(data.get("Tags")),
            account_id=self.account_id or data.get("OwnerId", ""),
            region=self.region,
        )

    def get(self, resource_id: str) -> VPC:
        """One VPC by id, with its full fan-out summary"""
        resource_id = self._require_id(resource_id)
        try:
            resp = self._call("ec2", "describe_vpcs", VpcIds=[resource_id])
        except APICallError as e:
            raise self._get_error(resource_id, cause=e) from e

        vpcs = resp.get("Vpcs", [])
        if not vpcs:
            raise self._get_error(resource_id)
        self.resolver.prime(LookupKind.VPC, resource_id, vpcs[0])
        return self.enrich(self._parse(vpcs[0]))

    # -------------------------------------------------------------------------
    # Fan-out enrichment
    # -------------------------------------------------------------------------

    def enrich(self, item: VPC, cancel_token: CancelToken | None = None) -> VPC:
        """Fill gateways, subnets, route tables and security groups

        Raises:
            AggregationError: any of the lookups failed (item is left untouched)
        """
        vpc_id = item.vpc_id
        aggregator = FanOutAggregator(
            f"vpc:{vpc_id}",
            max_workers=self.settings.fanout_workers,
            timeout=self.settings.fanout_timeout or None,
        )
        result = aggregator.run(
            {
                "internet": lambda token: self._internet_gateways(vpc_id, token),
                "nat": lambda token: self._nat_gateways(vpc_id, token),
                "endpoint": lambda token: self._endpoints(vpc_id, token),
                "tgw": lambda token: self._tgw_attachments(vpc_id, token),
                "peering": lambda token: self._peerings(vpc_id, token),
                "subnets": lambda token: self._paginate(
                    "ec2", "describe_subnets", "Subnets", token, Filters=_vpc_filter(vpc_id)
                ),
                "route_tables": lambda token: self._paginate(
                    "ec2", "describe_route_tables", "RouteTables", token, Filters=_vpc_filter(vpc_id)
                ),
                "security_groups": lambda token: self._paginate(
                    "ec2", "describe_security_groups", "SecurityGroups", token, Filters=_vpc_filter(vpc_id)
                ),
            },
            cancel_token=cancel_token,
        )

        route_tables: list[dict[str, Any]] = result["route_tables"]
        self.resolver.prime(LookupKind.VPC_ROUTE_TABLES, vpc_id, route_tables)

        subnets = []
        for data in result["subnets"]:
            self.resolver.prime(LookupKind.SUBNET, data.get("SubnetId", ""), data)
            subnet = parse_subnet(data, self.region, self.account_id)
            subnet.vpc_name = item.display_name
            table = route_table_for_subnet(route_tables, subnet.subnet_id)
            if table is not None:
                subnet.route_table_id = table.get("RouteTableId", "")
                subnet.route_table_name = ec2_name(table)
            subnets.append(subnet)

        for data in result["security_groups"]:
            self.resolver.prime(LookupKind.SECURITY_GROUP, data.get("GroupId", ""), data)

        gateways: list[Gateway] = []
        for name in GATEWAY_TASKS:
            gateways.extend(result[name])

        item.gateways = gateways
        item.subnets = subnets
        item.route_tables = [_parse_route_table(t) for t in route_tables]
        item.security_groups = [_parse_security_group(g) for g in result["security_groups"]]
        item.enriched = True
        return item

    def _internet_gateways(self, vpc_id: str, token: CancelToken) -> list[Gateway]:
        gateways = []
        for data in self._paginate(
            "ec2",
            "describe_internet_gateways",
            "InternetGateways",
            token,
            Filters=_vpc_filter(vpc_id, "attachment.vpc-id"),
        ):
            state = next(
                (a.get("State", "") for a in data.get("Attachments", []) if a.get("VpcId") == vpc_id),
                "",
            )
            gateways.append(
                Gateway(
                    gateway_id=data.get("InternetGatewayId", ""),
                    gateway_type="internet",
                    display_name=ec2_name(data),
                    state=state,
                )
            )
        return gateways

    def _nat_gateways(self, vpc_id: str, token: CancelToken) -> list[Gateway]:
        return [
            Gateway(
                gateway_id=data.get("NatGatewayId", ""),
                gateway_type="nat",
                display_name=ec2_name(data),
                state=data.get("State", ""),
            )
            for data in self._paginate(
                "ec2", "describe_nat_gateways", "NatGateways", token, Filter=_vpc_filter(vpc_id)
            )
        ]

    def _endpoints(self, vpc_id: str, token: CancelToken) -> list[Gateway]:
        return [
            Gateway(
                gateway_id=data.get("VpcEndpointId", ""),
                gateway_type="endpoint",
                display_name=ec2_name(data) or data.get("ServiceName", ""),
                state=data.get("State", ""),
            )
            for data in self._paginate(
                "ec2", "describe_vpc_endpoints", "VpcEndpoints", token, Filters=_vpc_filter(vpc_id)
            )
        ]

    def _tgw_attachments(self, vpc_id: str, token: CancelToken) -> list[Gateway]:
        return [
            Gateway(
                gateway_id=data.get("TransitGatewayAttachmentId", ""),
                gateway_type="tgw",
                display_name=ec2_name(data),
                state=data.get("State", ""),
                peer_id=data.get("TransitGatewayId", ""),
            )
            for data in self._paginate(
                "ec2",
                "describe_transit_gateway_vpc_attachments",
                "TransitGatewayVpcAttachments",
                token,
                Filters=_vpc_filter(vpc_id),
            )
        ]

    def _peerings(self, vpc_id: str, token: CancelToken) -> list[Gateway]:
        """Peering connections on either side; the partner VPC name is resolved here"""
        seen: set[str] = set()
        gateways = []
        for side in ("requester-vpc-info.vpc-id", "accepter-vpc-info.vpc-id"):
            for data in self._paginate(
                "ec2",
                "describe_vpc_peering_connections",
                "VpcPeeringConnections",
                token,
                Filters=_vpc_filter(vpc_id, side),
            ):
                pcx_id = data.get("VpcPeeringConnectionId", "")
                if pcx_id in seen:
                    continue
                seen.add(pcx_id)

                requester = data.get("RequesterVpcInfo") or {}
                accepter = data.get("AccepterVpcInfo") or {}
                peer = accepter if requester.get("VpcId") == vpc_id else requester
                peer_id = peer.get("VpcId", "")

                token.raise_if_cancelled("peering.peer_name")
                peer_name = ""
                if peer.get("Region", self.region) == self.region:
                    peer_name = self.resolver.resolve_name(LookupKind.VPC, peer_id, ec2_name)

                gateways.append(
                    Gateway(
                        gateway_id=pcx_id,
                        gateway_type="peering",
                        display_name=ec2_name(data),
                        state=(data.get("Status") or {}).get("Code", ""),
                        peer_id=peer_id,
                        peer_name=peer_name,
                    )
                )
        return gateways


class SubnetAdapter(BaseAdapter[Subnet]):
    """Subnets in one session/region"""

    kind = "subnet"

    def _list_page(self, page_token: str) -> tuple[list[Subnet], str]:
        params: dict[str, Any] = {}
        if page_token:
            params["NextToken"] = page_token
        resp = self._call("ec2", "describe_subnets", **params)

        subnets = []
        for data in resp.get("Subnets", []):
            self.resolver.prime(LookupKind.SUBNET, data.get("SubnetId", ""), data)
            subnets.append(parse_subnet(data, self.region, self.account_id))
        return subnets, resp.get("NextToken", "") or ""

    def enrich(self, item: Subnet, cancel_token: CancelToken | None = None) -> Subnet:
        """VPC name and route table; route tables are fetched once per VPC"""
        item.vpc_name = self.resolver.resolve_name(LookupKind.VPC, item.vpc_id, ec2_name)

        route_tables = self.resolver.try_resolve(LookupKind.VPC_ROUTE_TABLES, item.vpc_id)
        if route_tables:
            table = route_table_for_subnet(route_tables, item.subnet_id)
            if table is not None:
                item.route_table_id = table.get("RouteTableId", "")
                item.route_table_name = ec2_name(table)
        return item

    def get(self, resource_id: str) -> Subnet:
        resource_id = self._require_id(resource_id)
        try:
            resp = self._call("ec2", "describe_subnets", SubnetIds=[resource_id])
        except APICallError as e:
            raise self._get_error(resource_id, cause=e) from e

        subnets = resp.get("Subnets", [])
        if not subnets:
            raise self._get_error(resource_id)
        return self.enrich(parse_subnet(subnets[0], self.region, self.account_id))
