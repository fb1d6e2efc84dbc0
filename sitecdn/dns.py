"""
Route 53 alias from the custom site domain to the distribution.

Bound only when both useCustomDomain and createDns are set. The hosted zone is
looked up by root domain through a caller-supplied lookup; a failed lookup
aborts the build so no record is left pointing at a missing zone.
"""

from typing import Callable

import pulumi

from sitecdn._helpers import https_url
from sitecdn.config import SiteConfig
from sitecdn.errors import ZoneLookupError
from sitecdn.graph import RECORD, ResourceGraph, ResourceNode, Zone
from sitecdn.outputs import StackOutput

ZoneLookup = Callable[[str], Zone]


def bind_dns_alias(
    config: SiteConfig,
    graph: ResourceGraph,
    distribution: ResourceNode,
    find_zone: ZoneLookup | None,
) -> ResourceNode | None:
    """
    Add an A alias record for ``<hostname>.<root_domain>`` and emit ``customUrl``.

    Returns None when either flag is off.

    Raises:
        ZoneLookupError: no lookup was supplied or the zone does not exist.
    """
    if not (config.use_custom_domain and config.create_dns):
        pulumi.log.info("dns: skipped")
        return None

    if find_zone is None:
        raise ZoneLookupError(f"No zone lookup configured for '{config.root_domain}'")
    zone = find_zone(config.root_domain)
    if zone is None:
        raise ZoneLookupError(f"Hosted zone for '{config.root_domain}' not found")

    record = graph.add(
        ResourceNode(
            "cfAlias",
            RECORD,
            {
                "zone_id": zone.zone_id,
                "name": config.site_domain,
                "type": "A",
                "aliases": [
                    {
                        "name": distribution.ref("domain_name"),
                        "zone_id": distribution.ref("hosted_zone_id"),
                        "evaluate_target_health": False,
                    }
                ],
            },
        )
    )

    graph.emit(
        StackOutput(
            name="customUrl",
            description="Web Demo Custom URL",
            value=https_url(config.site_domain),
        )
    )
    pulumi.log.info(f"dns: alias {config.site_domain} in zone {zone.zone_id}")
    return record
