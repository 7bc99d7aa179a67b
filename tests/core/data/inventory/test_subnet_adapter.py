"""
tests/core/data/inventory/test_subnet_adapter.py - 서브넷 어댑터 테스트 (moto)
"""

import boto3
import pytest
from moto import mock_aws

from core.config import Settings
from core.data.inventory import SubnetAdapter, VPCAdapter
from core.exceptions import ListingError

REGION = "ap-northeast-2"


@pytest.fixture
def aws():
    """moto EC2: 이름 있는 VPC 하나, 서브넷 두 개, 서브넷 a에만 명시적 라우트 테이블"""
    with mock_aws():
        ec2 = boto3.client("ec2", region_name=REGION)

        vpc_id = ec2.create_vpc(CidrBlock="10.20.0.0/16")["Vpc"]["VpcId"]
        ec2.create_tags(Resources=[vpc_id], Tags=[{"Key": "Name", "Value": "app-vpc"}])

        subnet_a = ec2.create_subnet(VpcId=vpc_id, CidrBlock="10.20.1.0/24", AvailabilityZone=f"{REGION}a")
        subnet_b = ec2.create_subnet(VpcId=vpc_id, CidrBlock="10.20.2.0/24", AvailabilityZone=f"{REGION}c")
        subnet_a_id = subnet_a["Subnet"]["SubnetId"]
        subnet_b_id = subnet_b["Subnet"]["SubnetId"]
        ec2.create_tags(Resources=[subnet_a_id], Tags=[{"Key": "Name", "Value": "app-private-a"}])

        rtb_id = ec2.create_route_table(VpcId=vpc_id)["RouteTable"]["RouteTableId"]
        ec2.create_tags(Resources=[rtb_id], Tags=[{"Key": "Name", "Value": "app-private-rt"}])
        ec2.associate_route_table(RouteTableId=rtb_id, SubnetId=subnet_a_id)

        yield {
            "vpc_id": vpc_id,
            "subnet_a": subnet_a_id,
            "subnet_b": subnet_b_id,
            "route_table": rtb_id,
        }


@pytest.fixture
def session():
    return boto3.Session(region_name=REGION)


@pytest.fixture
def settings():
    return Settings(max_retries=0, fanout_workers=4)


class TestSubnetAdapter:
    """SubnetAdapter 테스트"""

    def test_list_includes_created_subnets(self, aws, session, settings):
        subnets = {s.subnet_id: s for s in SubnetAdapter(session, region=REGION, settings=settings).list_all()}

        assert aws["subnet_a"] in subnets
        assert aws["subnet_b"] in subnets

        subnet = subnets[aws["subnet_a"]]
        assert subnet.display_name == "app-private-a"
        assert subnet.cidr_block == "10.20.1.0/24"
        assert subnet.vpc_id == aws["vpc_id"]
        assert subnet.region == REGION

    def test_unnamed_subnet_uses_id(self, aws, session, settings):
        subnets = {s.subnet_id: s for s in SubnetAdapter(session, region=REGION, settings=settings).list_all()}
        assert subnets[aws["subnet_b"]].display_name == aws["subnet_b"]

    def test_enriched_vpc_name_and_route_table(self, aws, session, settings):
        adapter = SubnetAdapter(session, region=REGION, settings=settings)
        subnets = {s.subnet_id: s for s in adapter.list_enriched()}

        subnet = subnets[aws["subnet_a"]]
        assert subnet.vpc_name == "app-vpc"
        assert subnet.route_table_id == aws["route_table"]
        assert subnet.route_table_name == "app-private-rt"

        # 명시적 연결이 없으면 메인 라우트 테이블
        other = subnets[aws["subnet_b"]]
        assert other.route_table_id not in ("", aws["route_table"])

    def test_get(self, aws, session, settings):
        subnet = SubnetAdapter(session, region=REGION, settings=settings).get(aws["subnet_a"])

        assert subnet.subnet_id == aws["subnet_a"]
        assert subnet.vpc_name == "app-vpc"

    def test_get_missing(self, aws, session, settings):
        with pytest.raises(ListingError):
            SubnetAdapter(session, region=REGION, settings=settings).get("subnet-00000000000000000")

    def test_scope(self, aws, session, settings):
        adapter = SubnetAdapter(session, region=REGION, settings=settings)
        assert adapter.scope == f"default/{REGION}"


class TestVPCListing:
    def test_list_all_named_vpc(self, aws, session, settings):
        vpcs = {v.vpc_id: v for v in VPCAdapter(session, region=REGION, settings=settings).list_all()}

        vpc = vpcs[aws["vpc_id"]]
        assert vpc.display_name == "app-vpc"
        assert vpc.cidr_block == "10.20.0.0/16"
        assert vpc.enriched is False
