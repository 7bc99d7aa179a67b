"""
core/data/inventory/services/iam.py - IAM policy and role adapters

IAM is global: the scope ignores the session region. Policy documents,
policy tags and role attachments are secondary lookups; when one fails the
corresponding field stays empty.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import unquote

from core.exceptions import APICallError
from core.parallel import CancelToken

from ..types import IAMPolicy, IAMRole, LookupKind
from .base import BaseAdapter, account_from_arn, tags_to_dict

logger = logging.getLogger(__name__)


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def flatten_statements(document: Any) -> list[str]:
    """Policy document to one "effect actions resources" line per statement

    Example:
        {"Statement": [{"Effect": "Allow", "Action": "s3:GetObject", "Resource": "*"}]}
        -> ["Allow s3:GetObject *"]
    """
    if isinstance(document, str):
        try:
            document = json.loads(unquote(document))
        except ValueError:
            return []
    if not isinstance(document, dict):
        return []

    lines = []
    for statement in _as_list(document.get("Statement")):
        if not isinstance(statement, dict):
            continue
        actions = _as_list(statement.get("Action")) or [f"not:{a}" for a in _as_list(statement.get("NotAction"))]
        resources = _as_list(statement.get("Resource")) or [
            f"not:{r}" for r in _as_list(statement.get("NotResource"))
        ]
        parts = [str(statement.get("Effect", "")), " ".join(map(str, actions)), " ".join(map(str, resources))]
        lines.append(" ".join(part for part in parts if part))
    return lines


class _IAMAdapter(BaseAdapter[Any]):
    @property
    def scope(self) -> str:
        return f"{self.profile_name}/global"


class IAMPolicyAdapter(_IAMAdapter):
    """Customer managed IAM policies"""

    kind = "iam-policy"

    def _list_page(self, page_token: str) -> tuple[list[IAMPolicy], str]:
        params: dict[str, Any] = {"Scope": "Local"}
        if page_token:
            params["Marker"] = page_token
        resp = self._call("iam", "list_policies", **params)
        policies = [self._parse(data) for data in resp.get("Policies", [])]
        next_token = resp.get("Marker", "") if resp.get("IsTruncated") else ""
        return policies, next_token or ""

    def _parse(self, data: dict[str, Any]) -> IAMPolicy:
        arn = data.get("Arn", "")
        return IAMPolicy(
            policy_id=data.get("PolicyId", ""),
            name=data.get("PolicyName", ""),
            arn=arn,
            path=data.get("Path", ""),
            description=data.get("Description", ""),
            attachment_count=data.get("AttachmentCount", 0),
            default_version_id=data.get("DefaultVersionId", ""),
            is_attachable=data.get("IsAttachable", False),
            created_at=data.get("CreateDate"),
            updated_at=data.get("UpdateDate"),
            tags=tags_to_dict(data.get("Tags")),
            account_id=self.account_id or account_from_arn(arn),
        )

    def _lookups(self):
        lookups = super()._lookups()
        lookups[LookupKind.POLICY.value] = self._describe_policy
        return lookups

    def _describe_policy(self, arn: str) -> dict[str, Any]:
        """Policy metadata (with tags) plus its default version document"""
        policy = self._call("iam", "get_policy", PolicyArn=arn).get("Policy", {})
        version = policy.get("DefaultVersionId", "")
        document: Any = {}
        if version:
            resp = self._call("iam", "get_policy_version", PolicyArn=arn, VersionId=version)
            document = resp.get("PolicyVersion", {}).get("Document", {})
        return {"Policy": policy, "Document": document}

    def enrich(self, item: IAMPolicy, cancel_token: CancelToken | None = None) -> IAMPolicy:
        detail = self.resolver.try_resolve(LookupKind.POLICY, item.arn)
        if detail is not None:
            item.statements = flatten_statements(detail.get("Document"))
            item.tags = tags_to_dict(detail.get("Policy", {}).get("Tags")) or item.tags
        return item

    def get(self, resource_id: str) -> IAMPolicy:
        """One policy by ARN, id or name"""
        resource_id = self._require_id(resource_id)
        if resource_id.startswith("arn:"):
            try:
                detail = self._describe_policy(resource_id)
            except APICallError as e:
                raise self._get_error(resource_id, cause=e) from e
            self.resolver.prime(LookupKind.POLICY, resource_id, detail)
            return self.enrich(self._parse(detail["Policy"]))

        for policy in self.list_all():
            if resource_id in (policy.policy_id, policy.name):
                return self.enrich(policy)
        raise self._get_error(resource_id)


class IAMRoleAdapter(_IAMAdapter):
    """IAM roles with their attached managed policies"""

    kind = "iam-role"

    def _list_page(self, page_token: str) -> tuple[list[IAMRole], str]:
        params: dict[str, Any] = {}
        if page_token:
            params["Marker"] = page_token
        resp = self._call("iam", "list_roles", **params)
        roles = [self._parse(data) for data in resp.get("Roles", [])]
        next_token = resp.get("Marker", "") if resp.get("IsTruncated") else ""
        return roles, next_token or ""

    def _parse(self, data: dict[str, Any]) -> IAMRole:
        arn = data.get("Arn", "")
        return IAMRole(
            role_id=data.get("RoleId", ""),
            name=data.get("RoleName", ""),
            arn=arn,
            path=data.get("Path", ""),
            description=data.get("Description", ""),
            max_session_duration=data.get("MaxSessionDuration", 0),
            created_at=data.get("CreateDate"),
            tags=tags_to_dict(data.get("Tags")),
            account_id=self.account_id or account_from_arn(arn),
        )

    def _lookups(self):
        lookups = super()._lookups()
        lookups[LookupKind.ROLE_POLICIES.value] = lambda name: self._paginate(
            "iam", "list_attached_role_policies", "AttachedPolicies", RoleName=name
        )
        return lookups

    def enrich(self, item: IAMRole, cancel_token: CancelToken | None = None) -> IAMRole:
        attached = self.resolver.try_resolve(LookupKind.ROLE_POLICIES, item.name)
        if attached is not None:
            item.attached_policy_names = [p.get("PolicyName", "") for p in attached if p.get("PolicyName")]
        return item

    def get(self, resource_id: str) -> IAMRole:
        """One role by name"""
        resource_id = self._require_id(resource_id)
        try:
            resp = self._call("iam", "get_role", RoleName=resource_id)
        except APICallError as e:
            raise self._get_error(resource_id, cause=e) from e
        return self.enrich(self._parse(resp.get("Role", {})))
