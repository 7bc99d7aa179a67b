"""
tests/core/data/inventory/test_vpc_adapter.py - VPC fan-out 요약 테스트
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import NoCredentialsError

from core.data.inventory import VPCAdapter
from core.data.inventory.services.vpc import route_table_for_subnet
from core.exceptions import AggregationError, APICallError, OperationCancelledError
from core.parallel import CancelToken

VPC_ID = "vpc-1"


def _name(value):
    return [{"Key": "Name", "Value": value}]


def vpc_pages():
    """fan-out 작업별 describe_* 페이지"""
    return {
        "describe_internet_gateways": [
            {
                "InternetGateways": [
                    {
                        "InternetGatewayId": "igw-1",
                        "Attachments": [{"VpcId": VPC_ID, "State": "available"}],
                        "Tags": _name("main-igw"),
                    }
                ]
            }
        ],
        "describe_nat_gateways": [
            {"NatGateways": [{"NatGatewayId": "nat-1", "State": "available"}]},
            {"NatGateways": [{"NatGatewayId": "nat-2", "State": "pending"}]},
        ],
        "describe_vpc_endpoints": [
            {"VpcEndpoints": [{"VpcEndpointId": "vpce-1", "ServiceName": "com.amazonaws.s3", "State": "available"}]}
        ],
        "describe_transit_gateway_vpc_attachments": [
            {
                "TransitGatewayVpcAttachments": [
                    {"TransitGatewayAttachmentId": "tgw-attach-1", "TransitGatewayId": "tgw-1", "State": "available"}
                ]
            }
        ],
        "describe_vpc_peering_connections": [
            {
                "VpcPeeringConnections": [
                    {
                        "VpcPeeringConnectionId": "pcx-1",
                        "RequesterVpcInfo": {"VpcId": VPC_ID, "Region": "ap-northeast-2"},
                        "AccepterVpcInfo": {"VpcId": "vpc-peer", "Region": "ap-northeast-2"},
                        "Status": {"Code": "active"},
                    }
                ]
            }
        ],
        "describe_subnets": [
            {
                "Subnets": [
                    {"SubnetId": "subnet-a", "VpcId": VPC_ID, "CidrBlock": "10.0.1.0/24", "Tags": _name("app-a")},
                    {"SubnetId": "subnet-b", "VpcId": VPC_ID, "CidrBlock": "10.0.2.0/24"},
                ]
            }
        ],
        "describe_route_tables": [
            {
                "RouteTables": [
                    {"RouteTableId": "rtb-main", "Associations": [{"Main": True}], "Routes": [{}]},
                    {
                        "RouteTableId": "rtb-a",
                        "Associations": [{"SubnetId": "subnet-a"}],
                        "Routes": [{}, {}],
                        "Tags": _name("app-rt"),
                    },
                ]
            }
        ],
        "describe_security_groups": [
            {
                "SecurityGroups": [
                    {"GroupId": "sg-1", "GroupName": "web", "IpPermissions": [{}], "IpPermissionsEgress": [{}]}
                ]
            }
        ],
    }


@pytest.fixture
def adapter(mock_session, test_settings):
    return VPCAdapter(mock_session, region="ap-northeast-2", settings=test_settings)


@pytest.fixture
def ec2(mock_clients, pages):
    client = mock_clients["ec2"]
    client.describe_vpcs.side_effect = lambda **kwargs: {
        "Vpcs": [{"VpcId": VPC_ID, "CidrBlock": "10.0.0.0/16", "Tags": _name("prod-vpc")}]
        if "VpcIds" not in kwargs or kwargs["VpcIds"] == [VPC_ID]
        else [{"VpcId": kwargs["VpcIds"][0], "Tags": _name("peer-vpc")}]
    }
    pages(client, vpc_pages())
    return client


def fail_operation(client, operation, error):
    """특정 paginator만 실패하도록 설정"""
    original = client.get_paginator.side_effect

    def _get_paginator(op):
        if op == operation:
            paginator = MagicMock()
            paginator.paginate.side_effect = error
            return paginator
        return original(op)

    client.get_paginator.side_effect = _get_paginator


class TestVPCSummary:
    """모든 작업 성공 시 요약"""

    def test_gateways_merged_in_fixed_order(self, adapter, ec2):
        (vpc,) = adapter.list_enriched()

        assert vpc.enriched is True
        assert [g.gateway_id for g in vpc.gateways] == ["igw-1", "nat-1", "nat-2", "vpce-1", "tgw-attach-1", "pcx-1"]
        assert [g.gateway_type for g in vpc.gateways] == ["internet", "nat", "nat", "endpoint", "tgw", "peering"]

    def test_gateway_fields(self, adapter, ec2):
        (vpc,) = adapter.list_enriched()

        igw = vpc.gateways_of("internet")[0]
        assert igw.display_name == "main-igw"
        assert igw.state == "available"
        assert vpc.gateways_of("endpoint")[0].display_name == "com.amazonaws.s3"
        assert vpc.gateways_of("tgw")[0].peer_id == "tgw-1"

    def test_peer_name_resolved(self, adapter, ec2):
        (vpc,) = adapter.list_enriched()

        (peering,) = vpc.gateways_of("peering")
        assert peering.peer_id == "vpc-peer"
        assert peering.peer_name == "peer-vpc"
        assert peering.state == "active"

    def test_subnets_route_tables_security_groups(self, adapter, ec2):
        (vpc,) = adapter.list_enriched()

        subnets = {s.subnet_id: s for s in vpc.subnets}
        assert subnets["subnet-a"].display_name == "app-a"
        assert subnets["subnet-a"].vpc_name == "prod-vpc"
        assert subnets["subnet-a"].route_table_id == "rtb-a"
        assert subnets["subnet-a"].route_table_name == "app-rt"
        assert subnets["subnet-b"].display_name == "subnet-b"
        assert subnets["subnet-b"].route_table_id == "rtb-main"

        assert [(r.route_table_id, r.is_main, r.route_count) for r in vpc.route_tables] == [
            ("rtb-main", True, 1),
            ("rtb-a", False, 2),
        ]
        assert vpc.security_groups[0].group_name == "web"
        assert vpc.security_groups[0].inbound_rule_count == 1

    def test_lookup_filters(self, adapter, ec2):
        adapter.list_enriched()

        requested = {c.args[0] for c in ec2.get_paginator.call_args_list}
        assert requested == set(vpc_pages())

    def test_get_single_vpc(self, adapter, ec2):
        vpc = adapter.get(VPC_ID)

        assert vpc.vpc_id == VPC_ID
        assert vpc.display_name == "prod-vpc"
        assert vpc.enriched is True


class TestVPCSummaryFailure:
    """작업 하나라도 실패하면 요약 전체 실패"""

    def test_nat_failure_fails_whole_summary(self, adapter, ec2, client_error):
        fail_operation(ec2, "describe_nat_gateways", client_error("UnauthorizedOperation", "DescribeNatGateways"))

        with pytest.raises(AggregationError) as exc_info:
            adapter.list_enriched()

        assert exc_info.value.aggregate == f"vpc:{VPC_ID}"
        assert exc_info.value.task == "nat"

    def test_credential_failure_names_task(self, adapter, ec2):
        fail_operation(ec2, "describe_vpc_peering_connections", NoCredentialsError())

        with pytest.raises(AggregationError) as exc_info:
            adapter.list_enriched()

        assert exc_info.value.task == "peering"
        assert isinstance(exc_info.value.cause, APICallError)

    def test_failed_vpc_left_unenriched(self, adapter, ec2, client_error):
        fail_operation(ec2, "describe_subnets", client_error("InternalError", "DescribeSubnets"))

        (vpc,) = adapter.list_all()
        with pytest.raises(AggregationError):
            adapter.enrich(vpc)

        assert vpc.enriched is False
        assert vpc.gateways == []
        assert vpc.subnets == []

    def test_cancelled_before_fanout(self, adapter, ec2):
        token = CancelToken()
        token.cancel()

        (vpc,) = adapter.list_all()
        with pytest.raises(OperationCancelledError):
            adapter.enrich(vpc, cancel_token=token)


class TestRouteTableForSubnet:
    def test_explicit_association_wins(self):
        tables = [
            {"RouteTableId": "rtb-main", "Associations": [{"Main": True}]},
            {"RouteTableId": "rtb-a", "Associations": [{"SubnetId": "subnet-a"}]},
        ]
        assert route_table_for_subnet(tables, "subnet-a")["RouteTableId"] == "rtb-a"
        assert route_table_for_subnet(tables, "subnet-x")["RouteTableId"] == "rtb-main"

    def test_no_tables(self):
        assert route_table_for_subnet([], "subnet-a") is None
