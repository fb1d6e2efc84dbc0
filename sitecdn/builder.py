"""
Single-pass build of the site resource graph.

Stages run in order and each consumes the nodes produced before it:
validate → origin → certificate → access policy → distribution → DNS alias.
The first failure propagates unchanged; a graph is only returned when every
stage succeeded, so nothing partial ever reaches a backend.
"""

from sitecdn.access_policy import build_access_policy
from sitecdn.certificate import resolve_certificate
from sitecdn.config import SiteConfig
from sitecdn.distribution import DistributionInputs, compose_distribution
from sitecdn.dns import ZoneLookup, bind_dns_alias
from sitecdn.graph import ResourceGraph
from sitecdn.origin import build_origin
from sitecdn.validation import validate


def build_site(config: SiteConfig, find_zone: ZoneLookup | None = None) -> ResourceGraph:
    """
    Build the resource graph for config.

    Args:
        config: Immutable site configuration.
        find_zone: Hosted zone lookup, only called when the DNS alias is
            requested.

    Returns:
        The complete graph, tagged with ``Service=<svc_name>``. Its outputs
        hold accessPolicyId (when enabled), defaultUrl, then customUrl
        (when enabled), in emission order.
    """
    validate(config)

    graph = ResourceGraph(tags={"Service": config.svc_name})
    origin = build_origin(config, graph)
    certificate = resolve_certificate(config, graph)
    access_policy = build_access_policy(config, graph)
    distribution = compose_distribution(
        config,
        graph,
        DistributionInputs(
            origin=origin,
            certificate=certificate,
            access_policy=access_policy,
        ),
    )
    bind_dns_alias(config, graph, distribution, find_zone)
    return graph
