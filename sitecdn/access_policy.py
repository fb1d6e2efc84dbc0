"""
WAF access policy restricting the site to an IP allow list.

Three nodes are built in order, each referencing the ARN generated for the
previous one:

1. IP set holding the allowed CIDRs (order and duplicates kept as given).
2. Rule group with a single allow rule matching the IP set.
3. Web ACL that blocks by default and delegates to the rule group.

All three use the CLOUDFRONT scope, which only exists in us-east-1.
"""

from dataclasses import dataclass

import pulumi

from sitecdn.config import SiteConfig
from sitecdn.graph import IP_SET, RULE_GROUP, WEB_ACL, ResourceGraph, ResourceNode
from sitecdn.outputs import StackOutput

SCOPE = "CLOUDFRONT"
IP_SET_NAME = "webDemoAllowCidrs"
RULE_GROUP_NAME = "webDemoRuleGroup"
RULE_GROUP_CAPACITY = 1


@dataclass(frozen=True)
class AccessPolicy:
    ip_set: ResourceNode
    rule_group: ResourceNode
    web_acl: ResourceNode


def _visibility(metric_name: str) -> dict:
    return {
        "cloudwatch_metrics_enabled": False,
        "metric_name": metric_name,
        "sampled_requests_enabled": False,
    }


def build_access_policy(config: SiteConfig, graph: ResourceGraph) -> AccessPolicy | None:
    """
    Add the IP set, rule group and web ACL when createWafAcl is set.

    Emits the ``accessPolicyId`` output. Returns None when the flag is off.
    """
    if not config.create_waf_acl:
        pulumi.log.info("access policy: skipped")
        return None

    ip_set = graph.add(
        ResourceNode(
            "ipSet",
            IP_SET,
            {
                "name": IP_SET_NAME,
                "description": "Web Demo Allowed addresses",
                "ip_address_version": "IPV4",
                "addresses": list(config.allow_cidrs),
                "scope": SCOPE,
            },
        )
    )

    rule_group = graph.add(
        ResourceNode(
            "wafRules",
            RULE_GROUP,
            {
                "name": RULE_GROUP_NAME,
                "capacity": RULE_GROUP_CAPACITY,
                "scope": SCOPE,
                "visibility_config": _visibility("rulesWebDemo"),
                "rules": [
                    {
                        "name": "allowTestIps",
                        "priority": 0,
                        "action": {"allow": {}},
                        "statement": {
                            "ip_set_reference_statement": {"arn": ip_set.ref("arn")},
                        },
                        "visibility_config": _visibility("ruleWebDemo"),
                    }
                ],
            },
        )
    )

    web_acl = graph.add(
        ResourceNode(
            "webAcl",
            WEB_ACL,
            {
                "description": "Web Demo ACL",
                "default_action": {"block": {}},
                "scope": SCOPE,
                "visibility_config": _visibility("aclWebDemo"),
                "rules": [
                    {
                        "name": "webDemoRules",
                        "priority": 1,
                        "statement": {
                            "rule_group_reference_statement": {"arn": rule_group.ref("arn")},
                        },
                        # Use the rule group's own allow action.
                        "override_action": {"none": {}},
                        "visibility_config": _visibility("ruleJtrb"),
                    }
                ],
            },
        )
    )

    graph.emit(
        StackOutput(
            name="accessPolicyId",
            description="Web Demo ACL Id",
            value=web_acl.ref("id"),
        )
    )
    pulumi.log.info(f"access policy: allow {len(config.allow_cidrs)} CIDR(s), block everything else")
    return AccessPolicy(ip_set=ip_set, rule_group=rule_group, web_acl=web_acl)
